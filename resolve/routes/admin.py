"""
API routes for user administration and system statistics
"""
from fastapi import APIRouter, Depends, HTTPException

from resolve.constants import SUCCESS_MESSAGES
from resolve.errors import ResolveError
from resolve.logging_config import logger
from resolve.models import RoleUpdate
from resolve.services import UserAdminService
from resolve.session import SessionContext, get_service_store, require_admin
from resolve.store import SupabaseStore

router = APIRouter(prefix="/admin", tags=["admin"])


def get_user_admin(
    session: SessionContext = Depends(require_admin),
    service_store: SupabaseStore = Depends(get_service_store),
) -> UserAdminService:
    return UserAdminService(session.store, service_store)


@router.get("/users")
async def list_users(service: UserAdminService = Depends(get_user_admin)):
    """Every profile with its role and email"""
    try:
        users = await service.list_users()
        return {"users": users, "total": len(users)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load users")


@router.patch("/users/{user_id}/role")
async def update_role(
    user_id: str,
    update: RoleUpdate,
    service: UserAdminService = Depends(get_user_admin),
):
    try:
        await service.update_role(user_id, update.role)
        return {"message": SUCCESS_MESSAGES["role_updated"].format(role=update.role.value)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error updating role for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update role")


@router.get("/stats")
async def system_stats(service: UserAdminService = Depends(get_user_admin)):
    try:
        return await service.stats()

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching stats: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load statistics")

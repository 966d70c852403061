"""
User administration: listing, role changes, system stats and test-user seeding
"""
import asyncio
from typing import Any, Dict, List

from supabase import AuthError

from resolve.errors import ResolveError
from resolve.logging_config import logger
from resolve.models import (
    AppRole,
    Complaint,
    ComplaintStatus,
    Profile,
    SeedUser,
    SystemStats,
    UserRole,
    UserSummary,
)
from resolve.store import SupabaseStore


class UserAdminService:
    """Admin operations.

    ``store`` acts as the calling admin; ``service_store`` uses the
    service-role key and is needed for anything touching auth users.
    """

    def __init__(self, store: SupabaseStore, service_store: SupabaseStore):
        self.store = store
        self.service_store = service_store

    async def list_users(self) -> List[UserSummary]:
        profiles, roles, emails = await asyncio.gather(
            self.store.list_profiles(),
            self.store.list_roles(),
            self.service_store.auth_emails(),
        )
        role_by_user = {role.user_id: role.role for role in roles}

        return [
            UserSummary(
                id=profile.id,
                full_name=profile.full_name,
                email=emails.get(profile.id, "Unknown"),
                role=role_by_user.get(profile.id, AppRole.STUDENT),
                created_at=profile.created_at,
            )
            for profile in profiles
        ]

    async def update_role(self, user_id: str, role: AppRole) -> None:
        await self.store.update_role(user_id, role)
        logger.info(f"Role updated to {role.value}", extra={"user_id": user_id})

    async def stats(self) -> SystemStats:
        counts = await asyncio.gather(
            self.store.count(Profile.__tablename__),
            self.store.count(Complaint.__tablename__),
            self.store.count(Complaint.__tablename__, status=ComplaintStatus.PENDING.value),
            self.store.count(Complaint.__tablename__, status=ComplaintStatus.RESOLVED.value),
            self.store.count(UserRole.__tablename__, role=AppRole.ADMIN.value),
            self.store.count(UserRole.__tablename__, role=AppRole.STUDENT.value),
        )
        users, complaints, pending, resolved, admins, students = counts
        return SystemStats(
            total_users=users,
            total_complaints=complaints,
            pending_complaints=pending,
            resolved_complaints=resolved,
            total_admins=admins,
            total_students=students,
        )

    async def create_test_users(self, users: List[SeedUser]) -> Dict[str, Any]:
        """
        Create confirmed accounts with profiles and roles

        Per-user failures are collected and reported; they do not stop the batch.
        """
        logger.info(f"Creating {len(users)} test users")
        created = []
        errors = []

        for user in users:
            try:
                user_id = await self.service_store.create_auth_user(user.email, user.password, user.full_name)
            except (AuthError, ResolveError) as e:
                logger.error(f"Error creating auth user {user.email}: {str(e)}")
                errors.append({"email": user.email, "error": getattr(e, "message", str(e))})
                continue

            try:
                await self.service_store.insert_profile(user_id, user.full_name)
            except ResolveError as e:
                errors.append({"email": user.email, "error": f"Profile error: {e.message}"})
                continue

            try:
                await self.service_store.insert_role(user_id, user.role)
            except ResolveError as e:
                errors.append({"email": user.email, "error": f"Role error: {e.message}"})
                continue

            created.append({"email": user.email, "user_id": user_id, "role": user.role.value, "success": True})

        logger.info(f"Batch creation complete. Success: {len(created)}, Errors: {len(errors)}")
        return {
            "success": True,
            "created": created,
            "errors": errors or None,
            "summary": {"total": len(users), "successful": len(created), "failed": len(errors)},
        }

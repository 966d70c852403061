"""
API routes for security logs and suspicious activity review
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from resolve.constants import SUCCESS_MESSAGES
from resolve.errors import ConflictError, ResolveError
from resolve.logging_config import logger
from resolve.services import SecurityService
from resolve.services.scheduler import scheduler
from resolve.session import SessionContext, require_admin

router = APIRouter(prefix="/security", tags=["security"])


def get_security_service(session: SessionContext = Depends(require_admin)) -> SecurityService:
    return SecurityService(session.store)


@router.get("/logs")
async def security_logs(service: SecurityService = Depends(get_security_service)):
    """Latest security log entries"""
    try:
        logs = await service.recent_logs()
        return {"logs": logs, "total": len(logs)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching security logs: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load data")


@router.get("/suspicious-activities")
async def suspicious_activities(service: SecurityService = Depends(get_security_service)):
    try:
        activities = await service.recent_activities()
        return {
            "activities": activities,
            "unresolved": sum(1 for activity in activities if not activity.resolved),
        }

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching suspicious activities: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to load data")


@router.post("/suspicious-activities/detect")
async def run_detection(service: SecurityService = Depends(get_security_service)):
    """Run anomaly detection now, unless a run is already in progress"""
    if not await scheduler.run_detection(service.run_detection):
        raise ConflictError("Detection is already running")

    if scheduler.last_error:
        raise HTTPException(status_code=500, detail="Failed to run detection")

    return {"message": SUCCESS_MESSAGES["detection_completed"]}


@router.post("/suspicious-activities/{activity_id}/resolve")
async def resolve_activity(
    activity_id: str,
    notes: Optional[str] = Body(default=None, embed=True),
    session: SessionContext = Depends(require_admin),
    service: SecurityService = Depends(get_security_service),
):
    try:
        activity = await service.resolve_activity(activity_id, session.user_id, notes)
        return {"message": SUCCESS_MESSAGES["activity_resolved"], "activity": activity}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error resolving activity {activity_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to resolve activity")

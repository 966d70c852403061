"""
Security log and suspicious activity access for admins
"""
from datetime import datetime, timezone
from typing import List, Optional

from resolve.constants import SECURITY_LOG_LIMIT, SUSPICIOUS_ACTIVITY_LIMIT
from resolve.logging_config import logger
from resolve.models import SecurityLog, SuspiciousActivity
from resolve.store import SupabaseStore


class SecurityService:
    def __init__(self, store: SupabaseStore):
        self.store = store

    async def recent_logs(self) -> List[SecurityLog]:
        return await self.store.list_security_logs(SECURITY_LOG_LIMIT)

    async def recent_activities(self) -> List[SuspiciousActivity]:
        return await self.store.list_suspicious_activities(SUSPICIOUS_ACTIVITY_LIMIT)

    async def run_detection(self) -> None:
        await self.store.detect_suspicious_activity()
        logger.info("Suspicious activity detection completed")

    async def resolve_activity(self, activity_id: str, admin_id: str, notes: Optional[str] = None) -> SuspiciousActivity:
        changes = {
            "resolved": True,
            "resolved_at": datetime.now(timezone.utc).isoformat(),
            "resolved_by": admin_id,
        }
        if notes:
            changes["notes"] = notes
        activity = await self.store.update_suspicious_activity(activity_id, changes)
        logger.info(f"Suspicious activity {activity_id} resolved", extra={"user_id": admin_id})
        return activity

    async def record_event(
        self,
        event_type: str,
        severity: str,
        endpoint: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Write an audit event; a failure here never fails the caller"""
        try:
            await self.store.log_security_event(
                event_type,
                severity,
                endpoint=endpoint,
                ip_address=ip_address,
                user_agent=user_agent,
                user_id=user_id,
                details=details,
            )
        except Exception as e:
            logger.error(f"Failed to record security event {event_type}: {str(e)}")

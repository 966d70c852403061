"""
Dashboard view loading
"""
import asyncio
from typing import List

from resolve.logging_config import logger
from resolve.models import AppRole, ComplaintListItem, DashboardView, Severity
from resolve.services.analytics import summarize
from resolve.store import SupabaseStore


class DashboardService:
    """Fetches everything a dashboard renders in one pass"""

    def __init__(self, store: SupabaseStore):
        self.store = store

    @staticmethod
    def urgent_open(complaints: List[ComplaintListItem]) -> List[ComplaintListItem]:
        return [
            complaint
            for complaint in complaints
            if complaint.severity is Severity.URGENT and not complaint.status.is_terminal
        ]

    async def load_view(self, user_id: str, role: AppRole) -> DashboardView:
        if role is AppRole.ADMIN:
            profile, complaints, ratings = await asyncio.gather(
                self.store.get_profile(user_id),
                self.store.list_complaints(),
                self.store.list_ratings(),
            )
            analytics = summarize(complaints, ratings)
        else:
            profile, complaints = await asyncio.gather(
                self.store.get_profile(user_id),
                self.store.list_complaints(student_id=user_id),
            )
            analytics = None

        logger.debug(
            f"Loaded {role.value} dashboard with {len(complaints)} complaints",
            extra={"user_id": user_id},
        )
        return DashboardView(
            role=role,
            profile=profile,
            complaints=complaints,
            urgent=self.urgent_open(complaints) if role is AppRole.ADMIN else [],
            analytics=analytics,
        )

    async def load_analytics(self):
        complaints, ratings = await asyncio.gather(
            self.store.list_complaints(),
            self.store.list_ratings(),
        )
        return summarize(complaints, ratings)

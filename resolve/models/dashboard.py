from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlmodel import Field, SQLModel

from .complaint import ComplaintListItem
from .profile import AppRole, Profile


class DailyCount(SQLModel):
    date: str
    complaints: int


class CategoryResolution(SQLModel):
    category: str
    hours: int


class AnalyticsSummary(SQLModel):
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_severity: Dict[str, int] = Field(default_factory=dict)
    resolved: int = 0
    open_urgent: int = 0
    high_priority: int = 0
    average_resolution_hours: float = 0.0
    average_rating: Optional[float] = None
    trend: List[DailyCount] = Field(default_factory=list)
    slowest_categories: List[CategoryResolution] = Field(default_factory=list)


class DashboardView(SQLModel):
    """Everything a dashboard renders, fetched in one pass"""

    role: AppRole
    profile: Optional[Profile] = None
    complaints: List[ComplaintListItem] = Field(default_factory=list)
    urgent: List[ComplaintListItem] = Field(default_factory=list)
    analytics: Optional[AnalyticsSummary] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def complaint_ids(self) -> List[str]:
        return [complaint.id for complaint in self.complaints]

    def find(self, complaint_id: str) -> Optional[ComplaintListItem]:
        for complaint in self.complaints:
            if complaint.id == complaint_id:
                return complaint
        return None

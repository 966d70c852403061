from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import Field, SQLModel

from resolve.constants import SEVERITY_LABELS, STATUS_LABELS


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def label(self) -> str:
        return SEVERITY_LABELS[self.value]


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

    @property
    def is_terminal(self) -> bool:
        return self is ComplaintStatus.RESOLVED

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.value]


class Complaint(SQLModel):
    __tablename__ = "complaints"

    id: str
    student_id: str
    title: str
    description: str
    severity: Severity = Field(default=Severity.MEDIUM)
    status: ComplaintStatus = Field(default=ComplaintStatus.PENDING)
    category: Optional[str] = None
    ai_category: Optional[str] = None
    ai_confidence: Optional[float] = None
    ai_tags: Optional[List[str]] = None
    priority_score: Optional[float] = None
    predicted_hours: Optional[float] = None
    assigned_to: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    @property
    def resolution_hours(self) -> Optional[float]:
        if not self.resolved_at or not self.created_at:
            return None
        return (self.resolved_at - self.created_at).total_seconds() / 3600


class ComplaintListItem(Complaint):
    """Complaint row joined with its submitter's name and comment count"""

    submitter_name: Optional[str] = None
    comment_count: int = Field(default=0)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ComplaintListItem":
        data = dict(row)
        profile = data.pop("profiles", None)
        comments = data.pop("comments", None)

        if isinstance(profile, dict):
            data["submitter_name"] = profile.get("full_name")

        # PostgREST returns aggregate counts as [{"count": n}]
        if isinstance(comments, list) and comments and isinstance(comments[0], dict):
            data["comment_count"] = comments[0].get("count", 0)

        return cls.model_validate(data)

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel


class SecurityLog(SQLModel):
    __tablename__ = "security_logs"

    id: str
    event_type: str
    severity: str
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    endpoint: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class SuspiciousActivity(SQLModel):
    __tablename__ = "suspicious_activities"

    id: str
    activity_type: str
    severity: str
    event_count: int = Field(default=0)
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    time_window_start: Optional[datetime] = None
    time_window_end: Optional[datetime] = None
    detection_time: Optional[datetime] = None
    resolved: bool = Field(default=False)
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    notes: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

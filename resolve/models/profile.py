from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class AppRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class Profile(SQLModel):
    __tablename__ = "profiles"

    id: str
    full_name: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserRole(SQLModel):
    __tablename__ = "user_roles"

    user_id: str
    role: AppRole = Field(default=AppRole.STUDENT)


class UserSummary(SQLModel):
    """Profile joined with its role and auth email"""

    id: str
    full_name: str
    email: str = Field(default="Unknown")
    role: AppRole = Field(default=AppRole.STUDENT)
    created_at: Optional[datetime] = None


class SystemStats(SQLModel):
    total_users: int = 0
    total_complaints: int = 0
    pending_complaints: int = 0
    resolved_complaints: int = 0
    total_admins: int = 0
    total_students: int = 0

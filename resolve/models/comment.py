from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel


class Comment(SQLModel):
    __tablename__ = "comments"

    id: str
    complaint_id: str
    user_id: str
    content: str
    is_admin_reply: bool = Field(default=False)
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Comment":
        data = dict(row)
        profile = data.pop("profiles", None)
        if isinstance(profile, dict):
            data["author_name"] = profile.get("full_name")
        return cls.model_validate(data)

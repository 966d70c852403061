from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Rating(SQLModel):
    __tablename__ = "ratings"

    id: str
    complaint_id: str
    student_id: str
    rating: int = Field(ge=1, le=5)
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None

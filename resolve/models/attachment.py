from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Attachment(SQLModel):
    __tablename__ = "attachments"

    id: str
    complaint_id: str
    file_name: str
    file_type: str
    file_size: int = Field(ge=0)
    file_url: str  # storage path, not a public URL
    uploaded_by: str
    created_at: Optional[datetime] = None
    download_url: Optional[str] = None

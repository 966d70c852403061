"""
Complaint lifecycle: submission, status changes, comments, ratings and attachments
"""
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from resolve.config import settings
from resolve.constants import ERROR_MESSAGES
from resolve.errors import (
    AuthorizationError,
    ConflictError,
    InvalidInputError,
    StoreError,
)
from resolve.logging_config import logger
from resolve.models import (
    Attachment,
    ClassificationResult,
    Comment,
    CommentCreate,
    Complaint,
    ComplaintCreate,
    ComplaintListItem,
    ComplaintStatus,
    Rating,
    RatingCreate,
)
from resolve.store import SupabaseStore


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FailedUpload:
    file_name: str
    error: str


@dataclass
class SubmissionResult:
    """A created complaint plus the outcome of each attachment upload"""

    complaint: Complaint
    attachments: List[Attachment] = field(default_factory=list)
    failed_uploads: List[FailedUpload] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_uploads)


def validate_attachments(files: List[UploadedFile]) -> None:
    """Reject the whole submission before anything is written"""
    if len(files) > settings.MAX_FILES_PER_COMPLAINT:
        raise InvalidInputError(f"You can attach at most {settings.MAX_FILES_PER_COMPLAINT} files")

    for upload in files:
        if upload.content_type not in settings.ALLOWED_FILE_TYPES:
            raise InvalidInputError(f"{upload.filename}: only JPG, PNG, WEBP and PDF files are allowed")
        if upload.size > settings.MAX_FILE_SIZE:
            limit_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
            raise InvalidInputError(f"{upload.filename}: file size must be less than {limit_mb}MB")


def storage_path(user_id: str, complaint_id: str, filename: str) -> str:
    safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", filename) or "file"
    return f"{user_id}/{complaint_id}/{uuid.uuid4().hex}-{safe_name}"


def status_changes(status: ComplaintStatus, now: Optional[datetime] = None) -> dict:
    """Row changes for a status update; resolved_at is set iff the status is terminal"""
    now = now or datetime.now(timezone.utc)
    return {
        "status": status.value,
        "resolved_at": now.isoformat() if status.is_terminal else None,
        "updated_at": now.isoformat(),
    }


class ComplaintService:
    def __init__(self, store: SupabaseStore, ai_service=None):
        self.store = store
        self.ai_service = ai_service

    async def list_for(self, user_id: str, is_admin: bool) -> List[ComplaintListItem]:
        if is_admin:
            return await self.store.list_complaints()
        return await self.store.list_complaints(student_id=user_id)

    async def get(self, complaint_id: str) -> Complaint:
        return await self.store.get_complaint(complaint_id)

    async def classify(self, form: ComplaintCreate) -> ClassificationResult:
        if self.ai_service is None:
            return ClassificationResult.fallback()
        return await self.ai_service.classify_complaint(form.title, form.description, form.severity.value)

    async def submit(
        self,
        student_id: str,
        form: ComplaintCreate,
        files: Optional[List[UploadedFile]] = None,
    ) -> SubmissionResult:
        """
        Create a complaint and upload its attachments

        Attachment failures are collected per file; the complaint is kept.
        """
        files = files or []
        validate_attachments(files)

        classification = await self.classify(form)
        complaint = await self.store.insert_complaint(
            {
                "student_id": student_id,
                "title": form.title,
                "description": form.description,
                "severity": form.severity.value,
                "ai_category": classification.category,
                "ai_confidence": classification.confidence,
                "ai_tags": classification.tags,
                "priority_score": classification.priority_score,
                "predicted_hours": classification.predicted_hours,
            }
        )
        logger.info(
            f"Complaint created with severity {complaint.severity.value}",
            extra={"user_id": student_id, "complaint_id": complaint.id},
        )

        result = SubmissionResult(complaint=complaint)
        for upload in files:
            try:
                result.attachments.append(await self._store_attachment(student_id, complaint.id, upload))
            except StoreError as e:
                logger.warning(
                    f"Attachment {upload.filename} failed: {str(e)}",
                    extra={"user_id": student_id, "complaint_id": complaint.id},
                )
                result.failed_uploads.append(FailedUpload(upload.filename, ERROR_MESSAGES["file_upload"]))

        return result

    async def _store_attachment(self, user_id: str, complaint_id: str, upload: UploadedFile) -> Attachment:
        path = await self.store.upload_file(
            settings.ATTACHMENTS_BUCKET,
            storage_path(user_id, complaint_id, upload.filename),
            upload.content,
            upload.content_type,
        )
        return await self.store.insert_attachment(
            {
                "complaint_id": complaint_id,
                "file_name": upload.filename,
                "file_type": upload.content_type,
                "file_size": upload.size,
                "file_url": path,
                "uploaded_by": user_id,
            }
        )

    async def update_status(self, complaint_id: str, status: ComplaintStatus) -> Complaint:
        complaint = await self.store.update_complaint(complaint_id, status_changes(status))
        logger.info(f"Status updated to {status.value}", extra={"complaint_id": complaint_id})
        return complaint

    async def list_comments(self, complaint_id: str) -> List[Comment]:
        return await self.store.list_comments(complaint_id)

    async def add_comment(self, complaint_id: str, user_id: str, is_admin: bool, form: CommentCreate) -> Comment:
        await self.store.get_complaint(complaint_id)
        return await self.store.insert_comment(
            {
                "complaint_id": complaint_id,
                "user_id": user_id,
                "content": form.content,
                "is_admin_reply": is_admin,
            }
        )

    async def get_rating(self, complaint_id: str, student_id: str) -> Optional[Rating]:
        return await self.store.get_rating(complaint_id, student_id)

    async def rate(self, complaint_id: str, student_id: str, form: RatingCreate) -> Rating:
        """Ratings are write-once and only for the owner's resolved complaints"""
        complaint = await self.store.get_complaint(complaint_id)
        if complaint.student_id != student_id:
            raise AuthorizationError()
        if not complaint.status.is_terminal:
            raise InvalidInputError(ERROR_MESSAGES["not_resolved"])
        if await self.store.get_rating(complaint_id, student_id) is not None:
            raise ConflictError(ERROR_MESSAGES["already_rated"])

        return await self.store.insert_rating(
            {
                "complaint_id": complaint_id,
                "student_id": student_id,
                "rating": form.rating,
                "feedback": form.feedback or None,
            }
        )

    async def list_attachments(self, complaint_id: str) -> List[Attachment]:
        """Attachment metadata with short-lived download links"""
        attachments = await self.store.list_attachments(complaint_id)
        for attachment in attachments:
            attachment.download_url = await self.store.signed_url(
                settings.ATTACHMENTS_BUCKET, attachment.file_url, settings.SIGNED_URL_TTL
            )
        return attachments

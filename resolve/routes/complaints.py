"""
API routes for complaints, comments, ratings and attachments
"""
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from resolve.config import settings
from resolve.constants import SUCCESS_MESSAGES
from resolve.errors import AIServiceError, InvalidInputError, ResolveError
from resolve.logging_config import logger
from resolve.models import (
    CommentCreate,
    ComplaintCreate,
    RatingCreate,
    Severity,
    StatusUpdate,
)
from resolve.services import ComplaintService, UploadedFile, get_ai_service, optional_ai_service
from resolve.session import SessionContext, get_verified_session, require_admin, require_student

router = APIRouter(prefix="/complaints", tags=["complaints"])


def get_complaint_service(session: SessionContext = Depends(get_verified_session)) -> ComplaintService:
    return ComplaintService(session.store, optional_ai_service())


@router.get("/")
async def list_complaints(
    session: SessionContext = Depends(get_verified_session),
    service: ComplaintService = Depends(get_complaint_service),
):
    """Own complaints for students, every complaint by priority for admins"""
    try:
        complaints = await service.list_for(session.user_id, session.is_admin)
        return {"complaints": complaints, "total": len(complaints)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching complaints: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching complaints")


@router.post("/", status_code=201)
async def submit_complaint(
    title: str = Form(...),
    description: str = Form(...),
    severity: Severity = Form(Severity.MEDIUM),
    files: List[UploadFile] = File(default=[]),
    session: SessionContext = Depends(require_student),
    service: ComplaintService = Depends(get_complaint_service),
):
    """Submit a complaint with optional attachments"""
    try:
        form = ComplaintCreate(title=title, description=description, severity=severity)
    except ValidationError as e:
        raise InvalidInputError(e.errors()[0]["msg"])

    try:
        uploads = [
            UploadedFile(
                upload.filename or "file",
                upload.content_type or "",
                # one byte past the limit is enough to reject an oversized file
                await upload.read(settings.MAX_FILE_SIZE + 1),
            )
            for upload in files
        ]
        result = await service.submit(session.user_id, form, uploads)

        return {
            "message": SUCCESS_MESSAGES["complaint_submitted"],
            "complaint": result.complaint,
            "attachments": result.attachments,
            "failed_uploads": [
                {"file_name": failed.file_name, "error": failed.error} for failed in result.failed_uploads
            ],
        }

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error submitting complaint: {str(e)}", extra={"user_id": session.user_id})
        raise HTTPException(status_code=500, detail="Failed to submit complaint")


@router.get("/{complaint_id}")
async def get_complaint(complaint_id: str, service: ComplaintService = Depends(get_complaint_service)):
    try:
        return await service.get(complaint_id)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching complaint {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching complaint")


@router.patch("/{complaint_id}/status")
async def update_status(
    complaint_id: str,
    update: StatusUpdate,
    session: SessionContext = Depends(require_admin),
    service: ComplaintService = Depends(get_complaint_service),
):
    try:
        complaint = await service.update_status(complaint_id, update.status)
        return {
            "message": SUCCESS_MESSAGES["status_updated"].format(status=update.status.value),
            "complaint": complaint,
        }

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error updating status of {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update status")


@router.get("/{complaint_id}/comments")
async def list_comments(complaint_id: str, service: ComplaintService = Depends(get_complaint_service)):
    try:
        return {"comments": await service.list_comments(complaint_id)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching comments for {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching comments")


@router.post("/{complaint_id}/comments", status_code=201)
async def add_comment(
    complaint_id: str,
    form: CommentCreate,
    session: SessionContext = Depends(get_verified_session),
    service: ComplaintService = Depends(get_complaint_service),
):
    try:
        comment = await service.add_comment(complaint_id, session.user_id, session.is_admin, form)
        return {"message": SUCCESS_MESSAGES["comment_added"], "comment": comment}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error adding comment to {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to send comment")


@router.get("/{complaint_id}/rating")
async def get_rating(
    complaint_id: str,
    session: SessionContext = Depends(require_student),
    service: ComplaintService = Depends(get_complaint_service),
):
    rating = await service.get_rating(complaint_id, session.user_id)
    return {"rating": rating, "has_rated": rating is not None}


@router.post("/{complaint_id}/rating", status_code=201)
async def rate_complaint(
    complaint_id: str,
    form: RatingCreate,
    session: SessionContext = Depends(require_student),
    service: ComplaintService = Depends(get_complaint_service),
):
    try:
        rating = await service.rate(complaint_id, session.user_id, form)
        return {"message": SUCCESS_MESSAGES["rating_submitted"], "rating": rating}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error rating complaint {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit rating")


@router.get("/{complaint_id}/attachments")
async def list_attachments(complaint_id: str, service: ComplaintService = Depends(get_complaint_service)):
    try:
        return {"attachments": await service.list_attachments(complaint_id)}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error fetching attachments for {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching attachments")


@router.post("/{complaint_id}/reply-suggestions")
async def reply_suggestions(
    complaint_id: str,
    session: SessionContext = Depends(require_admin),
    service: ComplaintService = Depends(get_complaint_service),
):
    """Three drafted replies (formal, friendly, empathetic) for an admin"""
    try:
        complaint = await service.get(complaint_id)
        try:
            ai_service = get_ai_service()
        except ValueError as e:
            raise AIServiceError() from e
        return await ai_service.suggest_replies(complaint.title, complaint.description)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error drafting replies for {complaint_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate replies")

"""
Server-side proxies for AI gateway calls, role validation and user seeding
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials

from resolve.errors import AIServiceError, AuthenticationError, ResolveError
from resolve.logging_config import logger
from resolve.models import (
    ClassificationResult,
    ClassifyRequest,
    CreateTestUsersRequest,
    ReplyRequest,
    WritingAssistRequest,
)
from resolve.services import AIService, SecurityService, UserAdminService, get_ai_service
from resolve.session import (
    SessionContext,
    bearer_scheme,
    get_service_store,
    get_session,
    open_session,
    require_admin,
)
from resolve.store import SupabaseStore

router = APIRouter(prefix="/functions", tags=["functions"])


def require_ai_service() -> AIService:
    try:
        return get_ai_service()
    except ValueError as e:
        logger.error(f"AI gateway is not configured: {str(e)}")
        raise AIServiceError() from e


@router.post("/ai-writing-assistant")
async def ai_writing_assistant(
    request: WritingAssistRequest,
    session: SessionContext = Depends(get_session),
    ai_service: AIService = Depends(require_ai_service),
):
    """Improve text, suggest a title or category, or chat"""
    try:
        result = await ai_service.assist(request.action, request.text, request.description)
        return {"result": result}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error in ai-writing-assistant: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process AI request")


@router.post("/classify-complaint")
async def classify_complaint(
    request: ClassifyRequest,
    session: SessionContext = Depends(get_session),
):
    """Classification never fails; the neutral fallback covers gateway errors"""
    try:
        ai_service = get_ai_service()
    except ValueError:
        return ClassificationResult.fallback()
    return await ai_service.classify_complaint(request.title, request.description, request.severity.value)


@router.post("/generate-reply")
async def generate_reply(
    request: ReplyRequest,
    session: SessionContext = Depends(get_session),
    ai_service: AIService = Depends(require_ai_service),
):
    try:
        return await ai_service.suggest_replies(request.complaint.title, request.complaint.description)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error generating replies: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to generate replies")


@router.post("/validate-role")
async def validate_role(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service_store: SupabaseStore = Depends(get_service_store),
):
    """Server-side role lookup; failed authentication is audited"""
    security = SecurityService(service_store)
    audit = {
        "endpoint": "/validate-role",
        "ip_address": request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip"),
        "user_agent": request.headers.get("user-agent"),
    }

    if credentials is None:
        await security.record_event("failed_auth", "medium", details={"reason": "missing_auth_header"}, **audit)
        raise AuthenticationError("No authorization header")

    try:
        async with open_session(credentials.credentials) as session:
            return {"role": session.role.value}
    except AuthenticationError as e:
        await security.record_event("failed_auth", "high", details={"error": "invalid_token"}, **audit)
        raise AuthenticationError("Unauthorized") from e


@router.post("/create-test-users")
async def create_test_users(
    request: CreateTestUsersRequest,
    session: SessionContext = Depends(require_admin),
    service_store: SupabaseStore = Depends(get_service_store),
):
    try:
        return await UserAdminService(session.store, service_store).create_test_users(request.users)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error creating test users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create test users")

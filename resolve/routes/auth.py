"""
API routes for sign-up, sign-in and email verification
"""
from fastapi import APIRouter, Depends, HTTPException

from resolve.database import supabase_manager
from resolve.errors import ResolveError
from resolve.logging_config import logger
from resolve.models import ResendVerificationRequest, SignInRequest, SignUpRequest
from resolve.services import AuthService
from resolve.session import SessionContext, get_session

router = APIRouter(prefix="/auth", tags=["auth"])


async def get_auth_service() -> AuthService:
    client = await supabase_manager.create_anon_client()
    return AuthService(client, await supabase_manager.get_service_client())


@router.post("/sign-up", status_code=201)
async def sign_up(form: SignUpRequest, auth: AuthService = Depends(get_auth_service)):
    """Create a student account; a confirmation email is sent"""
    try:
        result = await auth.sign_up(form)
        return {"message": "Account created successfully!", **result}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error during sign-up: {str(e)}")
        raise HTTPException(status_code=500, detail="Error creating account")


@router.post("/sign-in")
async def sign_in(form: SignInRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        return await auth.sign_in(form)

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error during sign-in: {str(e)}")
        raise HTTPException(status_code=500, detail="Error signing in")


@router.post("/sign-out")
async def sign_out(
    session: SessionContext = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.sign_out(session.access_token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(session: SessionContext = Depends(get_session)):
    """Current user, including verification state for the verify-email page"""
    expires_at = session.verification_expires_at
    return {
        "user_id": session.user_id,
        "email": session.email,
        "role": session.role.value,
        "full_name": session.full_name,
        "email_verified": session.email_confirmed,
        "verification_expires_at": expires_at.isoformat() if expires_at else None,
    }


@router.post("/resend-verification")
async def resend_verification(
    form: ResendVerificationRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        await auth.resend_verification(form.email)
        return {"message": "Verification email sent! Check your inbox."}

    except ResolveError:
        raise
    except Exception as e:
        logger.error(f"Error resending verification: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to resend verification email")

"""
Account flows against the hosted auth service
"""
from typing import Any, Dict, Optional

from supabase import AsyncClient, AuthApiError, AuthError

from resolve.config import settings
from resolve.constants import ERROR_MESSAGES
from resolve.errors import AuthenticationError, ConflictError, InvalidInputError
from resolve.logging_config import logger
from resolve.models import SignInRequest, SignUpRequest


class AuthService:
    def __init__(self, client: AsyncClient, service_client: Optional[AsyncClient] = None):
        self.client = client
        self.service_client = service_client

    async def sign_up(self, form: SignUpRequest) -> Dict[str, Any]:
        try:
            response = await self.client.auth.sign_up(
                {
                    "email": form.email,
                    "password": form.password,
                    "options": {
                        "email_redirect_to": f"{settings.SITE_URL}/dashboard",
                        "data": {"full_name": form.full_name},
                    },
                }
            )
        except AuthError as e:
            if "already registered" in e.message:
                raise ConflictError(ERROR_MESSAGES["already_registered"]) from e
            logger.warning(f"Sign-up rejected: {e.message}")
            raise InvalidInputError(e.message) from e

        user = response.user
        logger.info("Student account created", extra={"user_id": user.id if user else None})
        return {
            "user_id": user.id if user else None,
            "email_verified": bool(user and user.email_confirmed_at),
        }

    async def sign_in(self, form: SignInRequest) -> Dict[str, Any]:
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": form.email, "password": form.password}
            )
        except AuthError as e:
            if "Invalid login credentials" in e.message:
                raise AuthenticationError(ERROR_MESSAGES["invalid_credentials"]) from e
            raise AuthenticationError(e.message) from e

        session = response.session
        if session is None:
            raise AuthenticationError(ERROR_MESSAGES["invalid_credentials"])

        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_at": session.expires_at,
            "user_id": response.user.id if response.user else None,
        }

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session's refresh tokens"""
        client = self.service_client or self.client
        try:
            await client.auth.admin.sign_out(access_token)
        except AuthApiError as e:
            logger.warning(f"Sign-out failed: {e.message}")

    async def resend_verification(self, email: str) -> None:
        try:
            await self.client.auth.resend(
                {
                    "type": "signup",
                    "email": email,
                    "options": {"email_redirect_to": f"{settings.SITE_URL}/dashboard"},
                }
            )
        except AuthError as e:
            raise InvalidInputError(e.message) from e

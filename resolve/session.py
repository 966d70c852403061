"""
Authenticated session context.

A SessionContext is created when a request or dashboard socket presents a
valid access token and torn down when that request or socket ends. It is
injected through FastAPI dependencies; nothing reads the current user from
globals.
"""
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import AuthApiError, AuthError

from resolve.config import settings
from resolve.constants import VERIFICATION_WINDOW_HOURS
from resolve.database import supabase_manager
from resolve.errors import (
    AuthenticationError,
    AuthorizationError,
    EmailNotVerifiedError,
)
from resolve.logging_config import logger
from resolve.models import AppRole
from resolve.store import SupabaseStore

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class SessionContext:
    user_id: str
    email: Optional[str]
    role: AppRole
    full_name: Optional[str]
    access_token: str
    store: SupabaseStore
    email_confirmed: bool = False
    sound_enabled: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role is AppRole.ADMIN

    @property
    def verification_expires_at(self) -> Optional[datetime]:
        if self.created_at is None:
            return None
        return self.created_at + timedelta(hours=VERIFICATION_WINDOW_HOURS)


@asynccontextmanager
async def open_session(
    access_token: str,
    sound_enabled: Optional[bool] = None,
) -> AsyncGenerator[SessionContext, None]:
    """Authenticate a token and hold a user-scoped client for the session"""
    if not access_token:
        raise AuthenticationError()

    async with supabase_manager.user_client(access_token) as client:
        try:
            response = await client.auth.get_user(access_token)
        except (AuthApiError, AuthError) as e:
            logger.warning(f"Rejected access token: {str(e)}")
            raise AuthenticationError() from e

        if response is None or response.user is None:
            raise AuthenticationError()

        user = response.user
        store = SupabaseStore(client)
        role, profile = await asyncio.gather(store.get_role(user.id), store.get_profile(user.id))

        session = SessionContext(
            user_id=user.id,
            email=user.email,
            role=role or AppRole.STUDENT,
            full_name=profile.full_name if profile else None,
            access_token=access_token,
            store=store,
            email_confirmed=user.email_confirmed_at is not None,
            sound_enabled=settings.SOUND_ENABLED_DEFAULT if sound_enabled is None else sound_enabled,
            created_at=user.created_at,
        )
        logger.debug("Session opened", extra={"user_id": session.user_id})
        try:
            yield session
        finally:
            logger.debug("Session closed", extra={"user_id": session.user_id})


# FastAPI dependencies

async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AsyncGenerator[SessionContext, None]:
    """Any signed-in user, verified or not"""
    if credentials is None:
        raise AuthenticationError()
    async with open_session(credentials.credentials) as session:
        yield session


async def get_verified_session(session: SessionContext = Depends(get_session)) -> SessionContext:
    if not session.email_confirmed:
        raise EmailNotVerifiedError()
    return session


async def require_admin(session: SessionContext = Depends(get_verified_session)) -> SessionContext:
    if not session.is_admin:
        raise AuthorizationError()
    return session


async def require_student(session: SessionContext = Depends(get_verified_session)) -> SessionContext:
    if session.is_admin:
        raise AuthorizationError("Only students can perform this action")
    return session


async def get_service_store() -> SupabaseStore:
    """Store on the service-role client, for auth administration and audit logging"""
    return SupabaseStore(await supabase_manager.get_service_client())

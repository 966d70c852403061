"""
Supabase client management.

The service-role client lives for the whole process. Every authenticated
request or dashboard socket gets its own client carrying the caller's JWT,
so row-level security applies to its queries and change feeds.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from supabase import AsyncClient, AsyncClientOptions, acreate_client

from resolve.config import settings
from resolve.logging_config import logger


class SupabaseManager:
    def __init__(self):
        self.service_client: Optional[AsyncClient] = None
        self._initialized = False

    async def initialize(self):
        """Create the service-role client"""
        if self._initialized:
            return

        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required")

        try:
            self.service_client = await acreate_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY,
                options=AsyncClientOptions(
                    auto_refresh_token=False,
                    persist_session=False,
                ),
            )
            self._initialized = True
            logger.info("Supabase service client initialized")

        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {str(e)}")
            raise

    async def close(self):
        """Release realtime channels held by the service client"""
        if self.service_client:
            await self.service_client.remove_all_channels()
            self.service_client = None
            self._initialized = False
            logger.info("Supabase connections closed")

    async def get_service_client(self) -> AsyncClient:
        if not self._initialized:
            await self.initialize()
        return self.service_client

    async def create_anon_client(self) -> AsyncClient:
        """Unauthenticated client for sign-up, sign-in and verification mail"""
        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required")

        return await acreate_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            options=AsyncClientOptions(auto_refresh_token=False, persist_session=False),
        )

    async def create_user_client(self, access_token: str) -> AsyncClient:
        """Client acting as the caller, so RLS policies apply"""
        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY are required")

        client = await acreate_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            options=AsyncClientOptions(
                headers={"Authorization": f"Bearer {access_token}"},
                auto_refresh_token=False,
                persist_session=False,
            ),
        )
        await client.realtime.set_auth(access_token)
        return client

    @asynccontextmanager
    async def user_client(self, access_token: str) -> AsyncGenerator[AsyncClient, None]:
        """Scoped user client; its realtime channels are released on exit"""
        client = await self.create_user_client(access_token)
        try:
            yield client
        finally:
            await client.remove_all_channels()

    async def health_check(self) -> bool:
        """Check if the hosted backend is reachable"""
        try:
            client = await self.get_service_client()
            await client.table("profiles").select("id").limit(1).execute()
            return True
        except Exception as e:
            logger.error(f"Supabase health check failed: {str(e)}")
            return False


# Global Supabase manager instance
supabase_manager = SupabaseManager()

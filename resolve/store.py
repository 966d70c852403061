"""
Typed access to the hosted store.

Rows are parsed into records here, once, so nothing downstream handles raw
dictionaries. Backend failures are translated into StoreError.
"""
from typing import Any, Callable, Dict, List, Optional

import httpx
from postgrest.types import CountMethod
from realtime.types import RealtimePostgresChangesListenEvent
from supabase import AsyncClient, AuthError, PostgrestAPIError, StorageException

from resolve.errors import NotFoundError, StoreError
from resolve.logging_config import logger
from resolve.models import (
    AppRole,
    Attachment,
    Comment,
    Complaint,
    ComplaintListItem,
    Profile,
    Rating,
    SecurityLog,
    SuspiciousActivity,
    UserRole,
)

COMPLAINT_LIST_COLUMNS = "*, profiles:student_id(full_name), comments(count)"
COMMENT_COLUMNS = "*, profiles(full_name)"


class SupabaseStore:
    """Repository over a Supabase client"""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, query, action: str):
        try:
            return await query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.error(f"Store error while trying to {action}: {str(e)}")
            raise StoreError() from e

    # Profiles and roles

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        response = await self._execute(
            self.client.table(Profile.__tablename__).select("*").eq("id", user_id).maybe_single(),
            "load profile",
        )
        if response is None or not response.data:
            return None
        return Profile.model_validate(response.data)

    async def profile_name(self, user_id: str) -> Optional[str]:
        profile = await self.get_profile(user_id)
        return profile.full_name if profile else None

    async def list_profiles(self) -> List[Profile]:
        response = await self._execute(
            self.client.table(Profile.__tablename__).select("*").order("created_at", desc=True),
            "list profiles",
        )
        return [Profile.model_validate(row) for row in response.data or []]

    async def get_role(self, user_id: str) -> Optional[AppRole]:
        response = await self._execute(
            self.client.table(UserRole.__tablename__).select("role").eq("user_id", user_id).maybe_single(),
            "load role",
        )
        if response is None or not response.data:
            return None
        return AppRole(response.data["role"])

    async def list_roles(self) -> List[UserRole]:
        response = await self._execute(
            self.client.table(UserRole.__tablename__).select("user_id, role"),
            "list roles",
        )
        return [UserRole.model_validate(row) for row in response.data or []]

    async def update_role(self, user_id: str, role: AppRole) -> None:
        response = await self._execute(
            self.client.table(UserRole.__tablename__).update({"role": role.value}).eq("user_id", user_id),
            "update role",
        )
        if not response.data:
            raise NotFoundError("User not found")

    async def insert_profile(self, user_id: str, full_name: str) -> None:
        await self._execute(
            self.client.table(Profile.__tablename__).insert({"id": user_id, "full_name": full_name}),
            "insert profile",
        )

    async def insert_role(self, user_id: str, role: AppRole) -> None:
        await self._execute(
            self.client.table(UserRole.__tablename__).insert({"user_id": user_id, "role": role.value}),
            "insert role",
        )

    async def count(self, table: str, **filters: Any) -> int:
        query = self.client.table(table).select("*", count=CountMethod.exact, head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        response = await self._execute(query, f"count {table}")
        return response.count or 0

    # Auth administration (service client only)

    async def auth_emails(self) -> Dict[str, str]:
        try:
            users = await self.client.auth.admin.list_users()
        except AuthError as e:
            logger.warning(f"Could not list auth users: {str(e)}")
            return {}
        return {user.id: user.email for user in users if user.email}

    async def create_auth_user(self, email: str, password: str, full_name: str) -> str:
        """Create a pre-confirmed auth user and return its id"""
        response = await self.client.auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"full_name": full_name},
            }
        )
        if response is None or response.user is None:
            raise StoreError("No user returned from auth")
        return response.user.id

    # Complaints

    async def list_complaints(self, student_id: Optional[str] = None) -> List[ComplaintListItem]:
        query = self.client.table(Complaint.__tablename__).select(COMPLAINT_LIST_COLUMNS)
        if student_id:
            query = query.eq("student_id", student_id).order("created_at", desc=True)
        else:
            query = query.order("priority_score", desc=True).order("created_at", desc=True)

        response = await self._execute(query, "list complaints")
        return [ComplaintListItem.from_row(row) for row in response.data or []]

    async def get_complaint(self, complaint_id: str) -> Complaint:
        response = await self._execute(
            self.client.table(Complaint.__tablename__).select("*").eq("id", complaint_id).maybe_single(),
            "load complaint",
        )
        if response is None or not response.data:
            raise NotFoundError("Complaint not found")
        return Complaint.model_validate(response.data)

    async def complaint_title(self, complaint_id: str) -> Optional[str]:
        response = await self._execute(
            self.client.table(Complaint.__tablename__).select("title").eq("id", complaint_id).maybe_single(),
            "load complaint title",
        )
        if response is None or not response.data:
            return None
        return response.data.get("title")

    async def complaint_owner(self, complaint_id: str) -> Optional[str]:
        response = await self._execute(
            self.client.table(Complaint.__tablename__).select("student_id").eq("id", complaint_id).maybe_single(),
            "load complaint owner",
        )
        if response is None or not response.data:
            return None
        return response.data.get("student_id")

    async def insert_complaint(self, values: Dict[str, Any]) -> Complaint:
        response = await self._execute(
            self.client.table(Complaint.__tablename__).insert(values),
            "insert complaint",
        )
        return Complaint.model_validate(response.data[0])

    async def update_complaint(self, complaint_id: str, changes: Dict[str, Any]) -> Complaint:
        response = await self._execute(
            self.client.table(Complaint.__tablename__).update(changes).eq("id", complaint_id),
            "update complaint",
        )
        if not response.data:
            raise NotFoundError("Complaint not found")
        return Complaint.model_validate(response.data[0])

    # Comments

    async def list_comments(self, complaint_id: str) -> List[Comment]:
        response = await self._execute(
            self.client.table(Comment.__tablename__)
            .select(COMMENT_COLUMNS)
            .eq("complaint_id", complaint_id)
            .order("created_at"),
            "list comments",
        )
        return [Comment.from_row(row) for row in response.data or []]

    async def insert_comment(self, values: Dict[str, Any]) -> Comment:
        response = await self._execute(
            self.client.table(Comment.__tablename__).insert(values),
            "insert comment",
        )
        return Comment.from_row(response.data[0])

    # Ratings

    async def get_rating(self, complaint_id: str, student_id: str) -> Optional[Rating]:
        response = await self._execute(
            self.client.table(Rating.__tablename__)
            .select("*")
            .eq("complaint_id", complaint_id)
            .eq("student_id", student_id)
            .maybe_single(),
            "load rating",
        )
        if response is None or not response.data:
            return None
        return Rating.model_validate(response.data)

    async def list_ratings(self) -> List[Rating]:
        response = await self._execute(
            self.client.table(Rating.__tablename__).select("*"),
            "list ratings",
        )
        return [Rating.model_validate(row) for row in response.data or []]

    async def insert_rating(self, values: Dict[str, Any]) -> Rating:
        response = await self._execute(
            self.client.table(Rating.__tablename__).insert(values),
            "insert rating",
        )
        return Rating.model_validate(response.data[0])

    # Attachments

    async def upload_file(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        try:
            response = await self.client.storage.from_(bucket).upload(
                path, content, {"content-type": content_type}
            )
        except (StorageException, httpx.HTTPError) as e:
            logger.error(f"Upload of {path} failed: {str(e)}")
            raise StoreError() from e
        return response.path

    async def signed_url(self, bucket: str, path: str, expires_in: int) -> Optional[str]:
        try:
            response = await self.client.storage.from_(bucket).create_signed_url(path, expires_in)
        except (StorageException, httpx.HTTPError) as e:
            logger.warning(f"Could not sign {path}: {str(e)}")
            return None
        return response.get("signedURL") or response.get("signedUrl")

    async def insert_attachment(self, values: Dict[str, Any]) -> Attachment:
        response = await self._execute(
            self.client.table(Attachment.__tablename__).insert(values),
            "insert attachment",
        )
        return Attachment.model_validate(response.data[0])

    async def list_attachments(self, complaint_id: str) -> List[Attachment]:
        response = await self._execute(
            self.client.table(Attachment.__tablename__)
            .select("*")
            .eq("complaint_id", complaint_id)
            .order("created_at"),
            "list attachments",
        )
        return [Attachment.model_validate(row) for row in response.data or []]

    # Security

    async def list_security_logs(self, limit: int) -> List[SecurityLog]:
        response = await self._execute(
            self.client.table(SecurityLog.__tablename__)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit),
            "list security logs",
        )
        return [SecurityLog.model_validate(row) for row in response.data or []]

    async def list_suspicious_activities(self, limit: int) -> List[SuspiciousActivity]:
        response = await self._execute(
            self.client.table(SuspiciousActivity.__tablename__)
            .select("*")
            .order("detection_time", desc=True)
            .limit(limit),
            "list suspicious activities",
        )
        return [SuspiciousActivity.model_validate(row) for row in response.data or []]

    async def update_suspicious_activity(self, activity_id: str, changes: Dict[str, Any]) -> SuspiciousActivity:
        response = await self._execute(
            self.client.table(SuspiciousActivity.__tablename__).update(changes).eq("id", activity_id),
            "update suspicious activity",
        )
        if not response.data:
            raise NotFoundError("Activity not found")
        return SuspiciousActivity.model_validate(response.data[0])

    async def detect_suspicious_activity(self) -> None:
        await self._execute(self.client.rpc("detect_suspicious_activity"), "run anomaly detection")

    async def log_security_event(
        self,
        event_type: str,
        severity: str,
        endpoint: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        params = {
            "_event_type": event_type,
            "_severity": severity,
            "_endpoint": endpoint,
            "_ip_address": ip_address,
            "_user_agent": user_agent,
            "_user_id": user_id,
            "_details": details or {},
        }
        await self._execute(
            self.client.rpc("log_security_event", {k: v for k, v in params.items() if v is not None}),
            "log security event",
        )

    # Realtime

    async def open_channel(
        self,
        topic: str,
        table: str,
        event: str,
        row_filter: Optional[str],
        handler: Callable[[Dict[str, Any]], None],
    ):
        channel = self.client.channel(topic)
        channel.on_postgres_changes(
            RealtimePostgresChangesListenEvent(event),
            callback=handler,
            table=table,
            schema="public",
            filter=row_filter,
        )
        await channel.subscribe()
        return channel

    async def close_channel(self, channel) -> None:
        await self.client.remove_channel(channel)

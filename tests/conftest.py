"""
Shared fakes for realtime and service tests
"""
import itertools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

_ids = itertools.count(1)


def complaint_row(
    complaint_id: Optional[str] = None,
    student_id: str = "student-1",
    title: str = "Projector broken in lab 3",
    severity: str = "medium",
    status: str = "pending",
    **extra: Any,
) -> Dict[str, Any]:
    row = {
        "id": complaint_id or f"complaint-{next(_ids)}",
        "student_id": student_id,
        "title": title,
        "description": "The projector in lab 3 has not worked for a week.",
        "severity": severity,
        "status": status,
        "created_at": "2026-10-01T09:00:00+00:00",
        "updated_at": "2026-10-01T09:00:00+00:00",
        "resolved_at": None,
    }
    row.update(extra)
    return row


def comment_row(
    complaint_id: str,
    user_id: str = "student-1",
    is_admin_reply: bool = False,
    content: str = "Any update on this?",
) -> Dict[str, Any]:
    return {
        "id": f"comment-{next(_ids)}",
        "complaint_id": complaint_id,
        "user_id": user_id,
        "content": content,
        "is_admin_reply": is_admin_reply,
        "created_at": "2026-10-01T10:00:00+00:00",
    }


def change_payload(
    table: str,
    kind: str,
    record: Dict[str, Any],
    old_record: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Payload in the shape the realtime client hands to callbacks"""
    return {
        "data": {
            "schema": "public",
            "table": table,
            "type": kind,
            "commit_timestamp": "2026-10-01T10:00:00Z",
            "record": record,
            "old_record": old_record or {},
            "columns": [],
            "errors": None,
        },
        "ids": [1],
    }


class FakeChannel:
    def __init__(self, topic: str, table: str, event: str, row_filter: Optional[str], handler: Callable):
        self.topic = topic
        self.table = table
        self.event = event
        self.row_filter = row_filter
        self.handler = handler
        self.closed = False

    def matches(self, table: str, kind: str, record: Dict[str, Any]) -> bool:
        if self.closed or self.table != table:
            return False
        if self.event not in ("*", kind):
            return False
        if self.row_filter:
            column, value = self.row_filter.split("=eq.", 1)
            return str(record.get(column)) == value
        return True


class FakeStore:
    """In-memory stand-in for SupabaseStore covering the realtime surface"""

    def __init__(self):
        self.channels: List[FakeChannel] = []
        self.profiles: Dict[str, str] = {}
        self.titles: Dict[str, str] = {}
        self.owners: Dict[str, str] = {}
        self.lookup_error: Optional[Exception] = None
        self.lookups: List[str] = []

    async def open_channel(self, topic, table, event, row_filter, handler):
        channel = FakeChannel(topic, table, event, row_filter, handler)
        self.channels.append(channel)
        return channel

    async def close_channel(self, channel):
        channel.closed = True

    @property
    def open_channels(self) -> List[FakeChannel]:
        return [channel for channel in self.channels if not channel.closed]

    def emit(self, table: str, kind: str, record: Dict[str, Any], old_record: Optional[Dict[str, Any]] = None):
        """Deliver a committed change to every matching channel, synchronously"""
        payload = change_payload(table, kind, record, old_record)
        for channel in self.channels:
            if channel.matches(table, kind, record):
                channel.handler(payload)

    async def profile_name(self, user_id: str) -> Optional[str]:
        self.lookups.append(f"profile:{user_id}")
        if self.lookup_error:
            raise self.lookup_error
        return self.profiles.get(user_id)

    async def complaint_title(self, complaint_id: str) -> Optional[str]:
        self.lookups.append(f"title:{complaint_id}")
        if self.lookup_error:
            raise self.lookup_error
        return self.titles.get(complaint_id)

    async def complaint_owner(self, complaint_id: str) -> Optional[str]:
        self.lookups.append(f"owner:{complaint_id}")
        if self.lookup_error:
            raise self.lookup_error
        return self.owners.get(complaint_id)


class RecordingSink:
    """Collects everything a pipeline would send to a dashboard"""

    def __init__(self):
        self.notifications = []
        self.views = []
        self.celebrations = []
        self.errors = []

    async def deliver(self, notification):
        self.notifications.append(notification)

    async def publish_view(self, view):
        self.views.append(view)

    async def celebrate(self, complaint_id):
        self.celebrations.append(complaint_id)

    async def report_error(self, message):
        self.errors.append(message)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def now():
    return datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

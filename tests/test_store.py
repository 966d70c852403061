"""
Unit tests for the store's row parsing, error mapping and channels
"""
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from realtime.types import RealtimePostgresChangesListenEvent

from conftest import complaint_row
from resolve.errors import NotFoundError, StoreError
from resolve.models import ComplaintStatus
from resolve.store import SupabaseStore


def query_returning(data=None, error=None):
    """Chainable PostgREST builder mock whose execute returns ``data``"""
    query = Mock()
    for method in ("select", "eq", "order", "limit", "maybe_single", "insert", "update"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute = AsyncMock(side_effect=error)
    else:
        query.execute = AsyncMock(return_value=Mock(data=data))
    return query


@pytest.fixture
def client():
    return Mock()


class TestComplaints:
    @pytest.mark.asyncio
    async def test_get_complaint_parses_row(self, client):
        client.table.return_value = query_returning(complaint_row("c-1", status="in_progress"))

        complaint = await SupabaseStore(client).get_complaint("c-1")

        client.table.assert_called_with("complaints")
        assert complaint.status is ComplaintStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_missing_complaint(self, client):
        client.table.return_value = query_returning(None)

        with pytest.raises(NotFoundError):
            await SupabaseStore(client).get_complaint("c-404")

    @pytest.mark.asyncio
    async def test_transport_error_becomes_store_error(self, client):
        client.table.return_value = query_returning(error=httpx.ConnectError("backend unreachable"))

        with pytest.raises(StoreError):
            await SupabaseStore(client).list_complaints()

    @pytest.mark.asyncio
    async def test_list_complaints_flattens_joins(self, client):
        row = complaint_row("c-1", profiles={"full_name": "Asha Menon"}, comments=[{"count": 2}])
        query = query_returning([row])
        client.table.return_value = query

        complaints = await SupabaseStore(client).list_complaints(student_id="student-1")

        query.eq.assert_called_with("student_id", "student-1")
        assert complaints[0].submitter_name == "Asha Menon"
        assert complaints[0].comment_count == 2


@pytest.mark.asyncio
async def test_complaint_title_absent(client):
    client.table.return_value = query_returning(None)

    assert await SupabaseStore(client).complaint_title("c-404") is None


@pytest.mark.asyncio
async def test_complaint_owner(client):
    query = query_returning({"student_id": "student-1"})
    client.table.return_value = query

    assert await SupabaseStore(client).complaint_owner("c-9") == "student-1"
    query.select.assert_called_with("student_id")
    query.eq.assert_called_with("id", "c-9")


class TestChannels:
    @pytest.mark.asyncio
    async def test_open_channel_subscribes_with_filter(self, client):
        channel = Mock()
        channel.subscribe = AsyncMock()
        client.channel.return_value = channel
        handler = Mock()

        opened = await SupabaseStore(client).open_channel(
            "dashboard:student-1:complaints:0", "complaints", "*", "student_id=eq.student-1", handler
        )

        assert opened is channel
        client.channel.assert_called_once_with("dashboard:student-1:complaints:0")
        channel.on_postgres_changes.assert_called_once_with(
            RealtimePostgresChangesListenEvent.All,
            callback=handler,
            table="complaints",
            schema="public",
            filter="student_id=eq.student-1",
        )
        channel.subscribe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_channel(self, client):
        client.remove_channel = AsyncMock()
        channel = Mock()

        await SupabaseStore(client).close_channel(channel)

        client.remove_channel.assert_awaited_once_with(channel)

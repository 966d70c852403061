"""
End-to-end tests for the dashboard pipeline: feed, rules and refresh together
"""
from typing import List

import pytest

from conftest import comment_row, complaint_row
from resolve.models import AppRole, ComplaintListItem, DashboardView
from resolve.realtime import DashboardPipeline, NotificationKind, SoundCue


class ViewSource:
    """Serves whatever rows the store holds right now"""

    def __init__(self, role: AppRole, rows: List[dict]):
        self.role = role
        self.rows = rows
        self.fail = False
        self.calls = 0

    async def __call__(self) -> DashboardView:
        self.calls += 1
        if self.fail:
            raise ConnectionError("store unavailable")
        return DashboardView(
            role=self.role,
            complaints=[ComplaintListItem.model_validate(row) for row in self.rows],
        )


def admin_pipeline(fake_store, sink, rows=None, **kwargs):
    source = ViewSource(AppRole.ADMIN, rows or [])
    return DashboardPipeline("admin-1", AppRole.ADMIN, fake_store, sink, source, **kwargs), source


def student_pipeline(fake_store, sink, rows=None, **kwargs):
    source = ViewSource(AppRole.STUDENT, rows or [])
    return DashboardPipeline("student-1", AppRole.STUDENT, fake_store, sink, source, **kwargs), source


class TestMounting:
    @pytest.mark.asyncio
    async def test_admin_subscriptions(self, fake_store, sink):
        pipeline, _ = admin_pipeline(fake_store, sink)
        async with pipeline:
            filters = [(c.table, c.event, c.row_filter) for c in fake_store.open_channels]

        assert filters == [("complaints", "*", None), ("comments", "INSERT", None)]

    @pytest.mark.asyncio
    async def test_student_subscriptions_are_scoped(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, focus_complaint_id="c-1")
        async with pipeline:
            filters = [(c.table, c.event, c.row_filter) for c in fake_store.open_channels]

        assert filters == [
            ("complaints", "*", "student_id=eq.student-1"),
            ("comments", "INSERT", "complaint_id=eq.c-1"),
        ]

    @pytest.mark.asyncio
    async def test_unmount_releases_channels(self, fake_store, sink):
        pipeline, _ = admin_pipeline(fake_store, sink)
        async with pipeline:
            assert len(fake_store.open_channels) == 2

        assert fake_store.open_channels == []

    @pytest.mark.asyncio
    async def test_initial_view_is_published(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, rows=[complaint_row("c-1")])
        async with pipeline:
            assert len(sink.views) == 1
            assert pipeline.view.complaint_ids == ["c-1"]


class TestNewUrgentComplaint:
    """An urgent complaint inserted while an admin is watching"""

    @pytest.mark.asyncio
    async def test_notification_names_submitter(self, fake_store, sink):
        fake_store.profiles["student-1"] = "Asha Menon"
        pipeline, _ = admin_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("complaints", "INSERT", complaint_row("c-5", severity="urgent"))
            await pipeline.subscriber.drain()

        assert len(sink.notifications) == 1
        notification = sink.notifications[0]
        assert "urgent" in notification.text
        assert "Asha Menon" in notification.text
        assert notification.sound is SoundCue.URGENT
        assert notification.kind is NotificationKind.NEW_COMPLAINT

    @pytest.mark.asyncio
    async def test_missing_profile_falls_back_to_student(self, fake_store, sink):
        pipeline, _ = admin_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("complaints", "INSERT", complaint_row("c-5", severity="urgent"))
            await pipeline.subscriber.drain()

        assert len(sink.notifications) == 1
        assert "urgent" in sink.notifications[0].text
        assert sink.notifications[0].text.endswith("from Student")

    @pytest.mark.asyncio
    async def test_failed_lookup_still_notifies(self, fake_store, sink):
        fake_store.lookup_error = ConnectionError("profiles unavailable")
        pipeline, _ = admin_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("complaints", "INSERT", complaint_row("c-5", severity="high"))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ["⚠️ New high complaint from Student"]

    @pytest.mark.asyncio
    async def test_insert_triggers_refresh(self, fake_store, sink):
        pipeline, source = admin_pipeline(fake_store, sink)

        async with pipeline:
            source.rows.append(complaint_row("c-5"))
            fake_store.emit("complaints", "INSERT", complaint_row("c-5"))
            await pipeline.subscriber.drain()

            assert source.calls == 2
            assert pipeline.view.complaint_ids == ["c-5"]


class TestEscalation:
    @pytest.mark.asyncio
    async def test_escalation_fires_once_under_replay(self, fake_store, sink):
        rows = [complaint_row("c-1", severity="medium", title="Broken lock")]
        pipeline, _ = admin_pipeline(fake_store, sink, rows=rows)

        escalated = complaint_row("c-1", severity="urgent", title="Broken lock")
        async with pipeline:
            fake_store.emit("complaints", "UPDATE", escalated, {"id": "c-1"})
            fake_store.emit("complaints", "UPDATE", escalated, {"id": "c-1"})
            fake_store.emit("complaints", "UPDATE", dict(escalated, status="in_progress"), {"id": "c-1"})
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ["🚨 Complaint escalated to urgent: Broken lock"]


class TestStudentResolution:
    """An admin resolves a student's pending complaint"""

    @pytest.mark.asyncio
    async def test_one_toast_and_one_celebration(self, fake_store, sink):
        rows = [complaint_row("c-1", title="Wi-Fi down")]
        pipeline, source = student_pipeline(fake_store, sink, rows=rows)

        resolved = complaint_row("c-1", title="Wi-Fi down", status="resolved", resolved_at="2026-10-02T09:00:00+00:00")
        async with pipeline:
            source.rows = [resolved]
            fake_store.emit("complaints", "UPDATE", resolved, {"id": "c-1"})
            await pipeline.subscriber.drain()

            # unrelated refresh afterwards
            await pipeline.refresh()

            # transport replays the same change
            fake_store.emit("complaints", "UPDATE", resolved, {"id": "c-1"})
            await pipeline.subscriber.drain()

        assert len(sink.notifications) == 1
        assert sink.notifications[0].text == 'Your complaint "Wi-Fi down" is now Resolved'
        assert sink.notifications[0].kind is NotificationKind.STATUS_CHANGE
        assert sink.celebrations == ["c-1"]

    @pytest.mark.asyncio
    async def test_reopen_and_resolve_again_celebrates_twice(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, rows=[complaint_row("c-1")])

        async with pipeline:
            fake_store.emit("complaints", "UPDATE", complaint_row("c-1", status="resolved"))
            fake_store.emit("complaints", "UPDATE", complaint_row("c-1", status="in_progress"))
            fake_store.emit("complaints", "UPDATE", complaint_row("c-1", status="resolved"))
            await pipeline.subscriber.drain()

        assert sink.celebrations == ["c-1", "c-1"]
        assert len(sink.notifications) == 3

    @pytest.mark.asyncio
    async def test_other_students_changes_never_arrive(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, rows=[complaint_row("c-1")])

        async with pipeline:
            fake_store.emit("complaints", "UPDATE", complaint_row("c-9", student_id="student-2", status="resolved"))
            await pipeline.subscriber.drain()

        assert sink.notifications == []

    @pytest.mark.asyncio
    async def test_sound_preference_is_respected(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, rows=[complaint_row("c-1")], sound_enabled=False)

        async with pipeline:
            fake_store.emit("complaints", "UPDATE", complaint_row("c-1", status="in_progress"))
            await pipeline.subscriber.drain()

        assert sink.notifications[0].sound is SoundCue.NONE


class TestComments:
    @pytest.mark.asyncio
    async def test_student_comment_uses_cached_title(self, fake_store, sink):
        pipeline, _ = admin_pipeline(fake_store, sink, rows=[complaint_row("c-1", title="Wi-Fi down")])

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-1"))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ['💬 New student comment on "Wi-Fi down"']
        assert fake_store.lookups == []

    @pytest.mark.asyncio
    async def test_student_comment_looks_up_unknown_title(self, fake_store, sink):
        fake_store.titles["c-4"] = "Hostel water supply"
        pipeline, _ = admin_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-4"))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ['💬 New student comment on "Hostel water supply"']

    @pytest.mark.asyncio
    async def test_student_comment_generic_when_title_unavailable(self, fake_store, sink):
        fake_store.lookup_error = ConnectionError("complaints unavailable")
        pipeline, _ = admin_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-4"))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ["💬 Student added a new comment"]

    @pytest.mark.asyncio
    async def test_admin_reply_reaches_owner(self, fake_store, sink):
        pipeline, _ = student_pipeline(fake_store, sink, rows=[complaint_row("c-1", title="Wi-Fi down")])

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-1", user_id="admin-1", is_admin_reply=True))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ['💬 Admin replied to "Wi-Fi down"']

    @pytest.mark.asyncio
    async def test_admin_reply_before_complaint_insert(self, fake_store, sink):
        """Test a reply that arrives before its complaint's own event"""
        fake_store.owners["c-9"] = "student-1"
        fake_store.titles["c-9"] = "Hostel water"
        pipeline, source = student_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-9", user_id="admin-1", is_admin_reply=True))
            source.rows.append(complaint_row("c-9", title="Hostel water"))
            fake_store.emit("complaints", "INSERT", complaint_row("c-9", title="Hostel water"))
            await pipeline.subscriber.drain()

        assert [n.text for n in sink.notifications] == ['💬 Admin replied to "Hostel water"']

    @pytest.mark.asyncio
    async def test_reply_on_unowned_complaint_is_ignored(self, fake_store, sink):
        fake_store.owners["c-7"] = "student-2"
        pipeline, _ = student_pipeline(fake_store, sink)

        async with pipeline:
            fake_store.emit("comments", "INSERT", comment_row("c-7", user_id="admin-1", is_admin_reply=True))
            await pipeline.subscriber.drain()

        assert sink.notifications == []
        assert fake_store.lookups == ["owner:c-7"]


class TestRefreshFailure:
    @pytest.mark.asyncio
    async def test_failure_is_reported_and_view_kept(self, fake_store, sink):
        pipeline, source = student_pipeline(fake_store, sink, rows=[complaint_row("c-1")])

        async with pipeline:
            source.fail = True
            fake_store.emit("complaints", "UPDATE", complaint_row("c-1", status="in_progress"))
            await pipeline.subscriber.drain()

            assert sink.errors == ["Failed to load data"]
            assert pipeline.view.complaint_ids == ["c-1"]

        # notification still went out before the refresh
        assert len(sink.notifications) == 1

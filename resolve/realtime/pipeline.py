"""
Subscription, classification and refresh wired together for one dashboard.

Admin and student dashboards share this pipeline; only the subscription
filters and the viewer context differ.
"""
import dataclasses
from typing import Awaitable, Callable, List, Optional, Protocol

from resolve.constants import ERROR_MESSAGES
from resolve.logging_config import logger
from resolve.models import AppRole, Comment, Complaint, DashboardView
from resolve.realtime.classifier import (
    Lookup,
    Notification,
    NotificationDecision,
    SoundCue,
    ViewerContext,
    classify_event,
)
from resolve.realtime.events import ChangeEvent, ChangeKind, FeedTable
from resolve.realtime.feed import ChangeFeedSubscriber, FeedFilter
from resolve.realtime.refresher import ViewRefresher
from resolve.realtime.transitions import Observed, TransitionLog


class NotificationSink(Protocol):
    async def deliver(self, notification: Notification) -> None: ...

    async def publish_view(self, view: DashboardView) -> None: ...

    async def celebrate(self, complaint_id: str) -> None: ...

    async def report_error(self, message: str) -> None: ...


class DashboardPipeline:
    """Realtime state for one mounted dashboard view.

    ``start`` subscribes before the first fetch so no change committed
    during the initial load is missed; ``close`` releases every channel.
    """

    def __init__(
        self,
        user_id: str,
        role: AppRole,
        store,
        sink: NotificationSink,
        fetch_view: Callable[[], Awaitable[DashboardView]],
        sound_enabled: bool = True,
        focus_complaint_id: Optional[str] = None,
    ):
        self.user_id = user_id
        self.role = role
        self.store = store
        self.sink = sink
        self.sound_enabled = sound_enabled
        self.focus_complaint_id = focus_complaint_id

        self.transitions = TransitionLog()
        self.subscriber = ChangeFeedSubscriber(store, prefix=f"dashboard:{user_id}")
        self.refresher: ViewRefresher[DashboardView] = ViewRefresher(fetch_view, self._on_view)
        self._owned: frozenset = frozenset()

    @property
    def view(self) -> Optional[DashboardView]:
        return self.refresher.current

    @property
    def viewer(self) -> ViewerContext:
        return ViewerContext(self.user_id, self.role, self._owned)

    def feed_filters(self) -> List[FeedFilter]:
        if self.role is AppRole.ADMIN:
            complaints = FeedFilter(FeedTable.COMPLAINTS, ChangeKind.ALL)
        else:
            complaints = FeedFilter(FeedTable.COMPLAINTS, ChangeKind.ALL, "student_id", self.user_id)

        if self.focus_complaint_id:
            comments = FeedFilter(
                FeedTable.COMMENTS, ChangeKind.INSERT, "complaint_id", self.focus_complaint_id
            )
        else:
            comments = FeedFilter(FeedTable.COMMENTS, ChangeKind.INSERT)

        return [complaints, comments]

    async def start(self) -> None:
        for feed_filter in self.feed_filters():
            await self.subscriber.subscribe(feed_filter, self.handle_event)
        await self.refresh()

    async def close(self) -> None:
        await self.subscriber.close()

    async def __aenter__(self) -> "DashboardPipeline":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def refresh(self) -> None:
        try:
            await self.refresher.refresh()
        except Exception as e:
            logger.error(f"Dashboard refresh failed: {str(e)}", extra={"user_id": self.user_id})
            await self.sink.report_error(ERROR_MESSAGES["load_failed"])

    async def _on_view(self, view: DashboardView) -> None:
        self.transitions.seed(view.complaints)
        if self.role is AppRole.STUDENT:
            self._owned = frozenset(view.complaint_ids) | self._owned
        await self.sink.publish_view(view)

    async def handle_event(self, event: ChangeEvent) -> None:
        previous = Observed()
        if isinstance(event.record, Complaint):
            previous = self.transitions.previous(event.record.id, event.previous)
            self.transitions.record(event.record)
            if self.role is AppRole.STUDENT and event.record.student_id == self.user_id:
                self._owned = self._owned | {event.record.id}
        elif isinstance(event.record, Comment) and self.role is AppRole.STUDENT:
            await self._learn_owner(event.record.complaint_id)

        decision = classify_event(event, self.viewer, previous)
        if decision is None:
            return

        if decision.notify:
            resolved = await self._resolve_lookup(decision)
            notification = decision.render(resolved)
            if notification is not None:
                if not self.sound_enabled:
                    notification = dataclasses.replace(notification, sound=SoundCue.NONE)
                logger.info(
                    f"Notifying {notification.kind.value}",
                    extra={"user_id": self.user_id, "complaint_id": notification.complaint_id},
                )
                await self.sink.deliver(notification)

        if decision.celebrate:
            await self.sink.celebrate(decision.complaint_id)

        if decision.refresh:
            await self.refresh()

    async def _learn_owner(self, complaint_id: str) -> None:
        """Comments can arrive before their complaint's own event or the next refresh"""
        if complaint_id in self._owned:
            return

        try:
            owner = await self.store.complaint_owner(complaint_id)
        except Exception as e:
            logger.warning(f"Complaint owner lookup failed: {str(e)}", extra={"complaint_id": complaint_id})
            return

        if owner == self.user_id:
            self._owned = self._owned | {complaint_id}

    async def _resolve_lookup(self, decision: NotificationDecision) -> Optional[str]:
        """Resolve the decision's lookup; failures yield None"""
        if decision.lookup is None or decision.lookup_key is None:
            return None

        try:
            if decision.lookup is Lookup.COMPLAINT_TITLE:
                cached = self.view.find(decision.lookup_key) if self.view else None
                if cached is not None:
                    return cached.title
                return await self.store.complaint_title(decision.lookup_key)

            return await self.store.profile_name(decision.lookup_key)
        except Exception as e:
            logger.warning(f"Notification lookup {decision.lookup.value} failed: {str(e)}")
            return None

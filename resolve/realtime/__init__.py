# Realtime change feed, notification rules and view refresh
from .events import ChangeEvent, ChangeKind, FeedTable
from .feed import ChangeFeedSubscriber, FeedFilter, Subscription
from .transitions import TransitionLog
from .classifier import (
    Lookup,
    Notification,
    NotificationDecision,
    NotificationKind,
    SoundCue,
    ViewerContext,
    classify_event,
)
from .refresher import ViewRefresher
from .pipeline import DashboardPipeline, NotificationSink

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "FeedTable",
    "ChangeFeedSubscriber",
    "FeedFilter",
    "Subscription",
    "TransitionLog",
    "Lookup",
    "Notification",
    "NotificationDecision",
    "NotificationKind",
    "SoundCue",
    "ViewerContext",
    "classify_event",
    "ViewRefresher",
    "DashboardPipeline",
    "NotificationSink",
]

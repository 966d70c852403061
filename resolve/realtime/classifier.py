"""
Notification rules for change events.

``classify_event`` is pure: it looks at one event, the viewer and the values
observed before the event, and says what (if anything) the viewer should be
told. Anything that needs the store, such as the submitter's name or the
parent complaint's title, is described as a lookup and resolved by the
caller.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from resolve.constants import SEVERITY_EMOJI
from resolve.models import AppRole, Comment, Complaint, ComplaintStatus, Severity
from resolve.realtime.events import ChangeEvent, ChangeKind
from resolve.realtime.transitions import Observed

FALLBACK_SUBMITTER = "Student"


class SoundCue(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    INFO = "info"
    NONE = "none"

    @classmethod
    def for_severity(cls, severity: Severity) -> "SoundCue":
        if severity is Severity.URGENT:
            return cls.URGENT
        if severity is Severity.HIGH:
            return cls.HIGH
        return cls.INFO


class NotificationKind(str, Enum):
    NEW_COMPLAINT = "new_complaint"
    URGENT_ESCALATION = "urgent_escalation"
    STATUS_CHANGE = "status_change"
    STUDENT_COMMENT = "student_comment"
    ADMIN_REPLY = "admin_reply"


class Lookup(str, Enum):
    SUBMITTER_NAME = "submitter_name"
    COMPLAINT_TITLE = "complaint_title"


@dataclass(frozen=True)
class ViewerContext:
    user_id: str
    role: AppRole
    owned_complaint_ids: FrozenSet[str] = frozenset()

    @property
    def is_admin(self) -> bool:
        return self.role is AppRole.ADMIN

    def owns(self, complaint: Complaint) -> bool:
        return complaint.student_id == self.user_id

    def owns_id(self, complaint_id: str) -> bool:
        return complaint_id in self.owned_complaint_ids


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    text: str
    sound: SoundCue
    complaint_id: str


@dataclass(frozen=True)
class NotificationDecision:
    """Outcome of classifying one event"""

    complaint_id: str
    refresh: bool = True
    notify: bool = False
    kind: Optional[NotificationKind] = None
    sound: SoundCue = SoundCue.NONE
    celebrate: bool = False
    lookup: Optional[Lookup] = None
    lookup_key: Optional[str] = None
    severity: Optional[Severity] = None
    status: Optional[ComplaintStatus] = None
    title: Optional[str] = None

    def render(self, resolved: Optional[str] = None) -> Optional[Notification]:
        """Build the notification text, with ``resolved`` as the lookup result"""
        if not self.notify or self.kind is None:
            return None

        if self.kind is NotificationKind.NEW_COMPLAINT:
            name = resolved or FALLBACK_SUBMITTER
            text = f"{SEVERITY_EMOJI[self.severity.value]} New {self.severity.value} complaint from {name}"
        elif self.kind is NotificationKind.URGENT_ESCALATION:
            text = f"🚨 Complaint escalated to urgent: {self.title}"
        elif self.kind is NotificationKind.STATUS_CHANGE:
            text = f'Your complaint "{self.title}" is now {self.status.label}'
        elif self.kind is NotificationKind.STUDENT_COMMENT:
            text = f'💬 New student comment on "{resolved}"' if resolved else "💬 Student added a new comment"
        else:
            text = f'💬 Admin replied to "{resolved}"' if resolved else "💬 Admin replied to your complaint"

        return Notification(self.kind, text, self.sound, self.complaint_id)


def classify_event(
    event: ChangeEvent,
    viewer: ViewerContext,
    previous: Observed,
) -> Optional[NotificationDecision]:
    """Decide what one change means for one viewer.

    Returns None when the event does not concern the viewer at all.
    ``previous`` holds the status and severity observed before the event.
    """
    if isinstance(event.record, Comment):
        return _classify_comment(event.kind, event.record, viewer)
    return _classify_complaint(event.kind, event.record, viewer, previous)


def _classify_complaint(
    kind: ChangeKind,
    complaint: Complaint,
    viewer: ViewerContext,
    previous: Observed,
) -> Optional[NotificationDecision]:
    if not viewer.is_admin and not viewer.owns(complaint):
        return None

    if kind is ChangeKind.INSERT:
        if viewer.is_admin:
            return NotificationDecision(
                complaint_id=complaint.id,
                notify=True,
                kind=NotificationKind.NEW_COMPLAINT,
                sound=SoundCue.for_severity(complaint.severity),
                lookup=Lookup.SUBMITTER_NAME,
                lookup_key=complaint.student_id,
                severity=complaint.severity,
            )
        return NotificationDecision(complaint_id=complaint.id)

    if kind is not ChangeKind.UPDATE:
        return NotificationDecision(complaint_id=complaint.id)

    resolved_now = (
        complaint.status is ComplaintStatus.RESOLVED
        and previous.status is not ComplaintStatus.RESOLVED
    )

    if viewer.is_admin:
        if complaint.severity is Severity.URGENT and previous.severity is not Severity.URGENT:
            return NotificationDecision(
                complaint_id=complaint.id,
                notify=True,
                kind=NotificationKind.URGENT_ESCALATION,
                sound=SoundCue.URGENT,
                severity=complaint.severity,
                title=complaint.title,
            )
        return NotificationDecision(complaint_id=complaint.id)

    if complaint.status is previous.status:
        return NotificationDecision(complaint_id=complaint.id)

    return NotificationDecision(
        complaint_id=complaint.id,
        notify=True,
        kind=NotificationKind.STATUS_CHANGE,
        sound=SoundCue.INFO,
        celebrate=resolved_now,
        status=complaint.status,
        title=complaint.title,
    )


def _classify_comment(
    kind: ChangeKind,
    comment: Comment,
    viewer: ViewerContext,
) -> Optional[NotificationDecision]:
    if kind is not ChangeKind.INSERT:
        return None

    if viewer.is_admin:
        if comment.is_admin_reply:
            return NotificationDecision(complaint_id=comment.complaint_id)
        return NotificationDecision(
            complaint_id=comment.complaint_id,
            notify=True,
            kind=NotificationKind.STUDENT_COMMENT,
            sound=SoundCue.INFO,
            lookup=Lookup.COMPLAINT_TITLE,
            lookup_key=comment.complaint_id,
        )

    if not viewer.owns_id(comment.complaint_id):
        return None

    if not comment.is_admin_reply:
        return NotificationDecision(complaint_id=comment.complaint_id)

    return NotificationDecision(
        complaint_id=comment.complaint_id,
        notify=True,
        kind=NotificationKind.ADMIN_REPLY,
        sound=SoundCue.INFO,
        lookup=Lookup.COMPLAINT_TITLE,
        lookup_key=comment.complaint_id,
    )

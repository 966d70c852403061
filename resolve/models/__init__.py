# Typed records parsed at the store boundary
from .complaint import Complaint, ComplaintListItem, ComplaintStatus, Severity
from .comment import Comment
from .attachment import Attachment
from .rating import Rating
from .profile import AppRole, Profile, SystemStats, UserRole, UserSummary
from .security import SecurityLog, SuspiciousActivity
from .ai import ClassificationResult, ReplySuggestions
from .dashboard import AnalyticsSummary, CategoryResolution, DailyCount, DashboardView
from .forms import (
    ClassifyRequest,
    CommentCreate,
    ComplaintCreate,
    ComplaintDraft,
    CreateTestUsersRequest,
    RatingCreate,
    ReplyRequest,
    ResendVerificationRequest,
    RoleUpdate,
    SeedUser,
    SignInRequest,
    SignUpRequest,
    StatusUpdate,
    WritingAssistRequest,
)

__all__ = [
    "Complaint",
    "ComplaintListItem",
    "ComplaintStatus",
    "Severity",
    "Comment",
    "Attachment",
    "Rating",
    "AppRole",
    "Profile",
    "UserRole",
    "UserSummary",
    "SystemStats",
    "SecurityLog",
    "SuspiciousActivity",
    "ClassificationResult",
    "ReplySuggestions",
    "AnalyticsSummary",
    "CategoryResolution",
    "DailyCount",
    "DashboardView",
    "ClassifyRequest",
    "CommentCreate",
    "ComplaintCreate",
    "ComplaintDraft",
    "CreateTestUsersRequest",
    "RatingCreate",
    "ReplyRequest",
    "ResendVerificationRequest",
    "RoleUpdate",
    "SeedUser",
    "SignInRequest",
    "SignUpRequest",
    "StatusUpdate",
    "WritingAssistRequest",
]

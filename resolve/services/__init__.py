# Business logic services package
from .ai_service import AIService, get_ai_service, optional_ai_service
from .auth_service import AuthService
from .analytics import summarize
from .complaint_service import ComplaintService, SubmissionResult, UploadedFile
from .dashboard_service import DashboardService
from .security_service import SecurityService
from .user_admin import UserAdminService
from .scheduler import DetectionScheduler

__all__ = [
    "AIService",
    "get_ai_service",
    "optional_ai_service",
    "AuthService",
    "summarize",
    "ComplaintService",
    "SubmissionResult",
    "UploadedFile",
    "DashboardService",
    "SecurityService",
    "UserAdminService",
    "DetectionScheduler",
]

"""
Application constants: labels, limits and user-facing messages
"""

APP_NAME = "Brototype Resolve"
APP_DESCRIPTION = "Minimalist complaint management system"

# Validation limits
MIN_TITLE_LENGTH = 5
MAX_TITLE_LENGTH = 200
MIN_DESCRIPTION_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 2000
MAX_CLASSIFY_DESCRIPTION_LENGTH = 5000
MAX_COMMENT_LENGTH = 1000
MAX_FEEDBACK_LENGTH = 500
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

# Query limits
SECURITY_LOG_LIMIT = 100
SUSPICIOUS_ACTIVITY_LIMIT = 50

# Priority score above which a complaint is flagged as high priority
HIGH_PRIORITY_THRESHOLD = 70

# Email verification links expire this many hours after sign-up
VERIFICATION_WINDOW_HOURS = 24

STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In Progress",
    "resolved": "Resolved",
}

SEVERITY_LABELS = {
    "low": "Low",
    "medium": "Medium",
    "high": "High",
    "urgent": "Urgent",
}

SEVERITY_EMOJI = {
    "low": "📝",
    "medium": "📋",
    "high": "⚠️",
    "urgent": "🚨",
}

ERROR_MESSAGES = {
    "generic": "An unexpected error occurred. Please try again.",
    "network": "Network error. Please check your connection.",
    "authentication": "Authentication failed. Please try logging in again.",
    "authorization": "You do not have permission to perform this action.",
    "email_not_verified": "Please verify your email before accessing the dashboard.",
    "validation": "Please check your input and try again.",
    "file_upload": "File upload failed. Please try again.",
    "load_failed": "Failed to load data",
    "rate_limited": "Rate limit exceeded. Please try again later.",
    "credits_exhausted": "AI credits exhausted. Please contact support.",
    "ai_failed": "Failed to process AI request",
    "invalid_credentials": "Invalid email or password",
    "already_registered": "This email is already registered. Please login instead.",
    "already_rated": "You have already rated this complaint",
    "not_resolved": "Only resolved complaints can be rated",
}

SUCCESS_MESSAGES = {
    "complaint_submitted": "Complaint submitted successfully!",
    "status_updated": "Status updated to {status}",
    "comment_added": "Comment sent",
    "rating_submitted": "Thank you for your feedback!",
    "detection_completed": "Detection completed",
    "activity_resolved": "Activity marked as resolved",
    "role_updated": "Role updated to {role}",
}

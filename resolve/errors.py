"""
Error taxonomy shared by services and routes.

Each error carries the HTTP status it maps to and the message shown to the
user. Nothing here is retried automatically; recovery is always user-initiated.
"""
from typing import Optional

from resolve.constants import ERROR_MESSAGES


class ResolveError(Exception):
    """Base class for expected application errors"""

    status_code = 500
    default_message = ERROR_MESSAGES["generic"]

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(ResolveError):
    status_code = 401
    default_message = ERROR_MESSAGES["authentication"]


class EmailNotVerifiedError(ResolveError):
    status_code = 403
    default_message = ERROR_MESSAGES["email_not_verified"]


class AuthorizationError(ResolveError):
    status_code = 403
    default_message = ERROR_MESSAGES["authorization"]


class InvalidInputError(ResolveError):
    status_code = 400
    default_message = ERROR_MESSAGES["validation"]


class NotFoundError(ResolveError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ResolveError):
    status_code = 409
    default_message = "Conflict"


class StoreError(ResolveError):
    """Transient failure talking to the hosted backend"""

    status_code = 503
    default_message = ERROR_MESSAGES["generic"]


class AIServiceError(ResolveError):
    status_code = 502
    default_message = ERROR_MESSAGES["ai_failed"]


class AIRateLimitError(AIServiceError):
    status_code = 429
    default_message = ERROR_MESSAGES["rate_limited"]


class AICreditsExhaustedError(AIServiceError):
    status_code = 402
    default_message = ERROR_MESSAGES["credits_exhausted"]

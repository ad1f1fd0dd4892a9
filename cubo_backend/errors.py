"""
Domain error taxonomy.

Every error carries a user-facing message, a stable error_code the frontend
can switch on, and the HTTP status the API renders it with. None of these are
fatal: each one describes a condition the user can fix and retry.
"""

from typing import Optional


class CuboError(Exception):
    """Base class for all recoverable application errors."""

    status_code = 400
    error_code = "CUBO_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class ValidationError(CuboError):
    """Missing required field, non-positive investment, empty list before an action."""
    status_code = 422
    error_code = "VALIDATION_ERROR"


class NoActiveSession(CuboError):
    """A session-scoped operation was attempted without a valid session."""
    status_code = 404
    error_code = "NO_ACTIVE_SESSION"


class NotFoundError(CuboError):
    status_code = 404
    error_code = "NOT_FOUND"


class BackendError(CuboError):
    """Storage failure. The caller keeps its in-memory state and may retry."""
    status_code = 503
    error_code = "BACKEND_ERROR"


class ProxyError(CuboError):
    """Text-generation failure: provider error, timeout, or malformed body."""
    status_code = 502
    error_code = "PROXY_ERROR"

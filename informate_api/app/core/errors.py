"""
Application-wide exception hierarchy.

Services raise these errors; ``main.create_app`` registers handlers that
turn them into the JSON envelope used by every endpoint::

    {"success": false, "message": "...", "error": "..."}

Each subclass fixes the HTTP status code it maps to, so services never
import FastAPI.
"""

from typing import Any, Dict, Optional


class InformateError(Exception):
    """Base application error with structured context."""

    status_code: int = 400
    code: str = "APP_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        result: Dict[str, Any] = {"success": False, "message": self.message}
        if self.details:
            result.update(self.details)
        return result


class ValidationError(InformateError):
    """A required field is missing or a value is malformed."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class UnauthorizedError(InformateError):
    """Missing or invalid bearer token on a protected route."""

    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(InformateError):
    """The caller is authenticated but the edit policy rejects the action."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(InformateError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(InformateError):
    status_code = 409
    code = "CONFLICT"


class PayloadTooLargeError(InformateError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


class UnsupportedMediaError(InformateError):
    status_code = 415
    code = "UNSUPPORTED_MEDIA_TYPE"


class StorageError(InformateError):
    """The database failed underneath a service call.

    The client sees a generic message; the driver's error text travels in
    ``error`` for diagnostics only.
    """

    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "Server Error", cause: Optional[BaseException] = None):
        super().__init__(message, details={"error": str(cause)} if cause is not None else None)
        self.cause = cause

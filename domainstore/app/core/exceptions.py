"""Error taxonomy. Every subclass maps to one HTTP status and an ``{"error": ...}`` body."""
from typing import Optional


class ApiError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Resource conflict"


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"

"""
Exception types raised by the tag services.

Each exception carries the HTTP status code and error code it maps to, so the
API layer handles all of them with a single exception handler:

    from app.core.exceptions import NotFoundError

    # In a service
    if tag is None:
        raise NotFoundError(f"Tag {tag_id} not found")
"""

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"


class BlogException(Exception):
    """Base class for all application errors surfaced to callers."""

    error_code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(BlogException):
    """Malformed input: bad id, empty required field, invalid format."""

    error_code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class ConflictError(BlogException):
    """Name or slug already used by another live tag."""

    error_code = ErrorCode.CONFLICT
    status_code = 409


class NotFoundError(BlogException):
    """Target tag does not exist or is soft-deleted."""

    error_code = ErrorCode.NOT_FOUND
    status_code = 404

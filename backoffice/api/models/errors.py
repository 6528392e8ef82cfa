"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in every error response."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, bad query)."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Missing, invalid or expired bearer token."""

    FORBIDDEN = "FORBIDDEN"
    """The caller's role lacks the required permission."""

    NOT_FOUND = "NOT_FOUND"
    """The requested record does not exist."""

    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    """The requested data history entry does not exist."""

    NO_DATA_TO_RESTORE = "NO_DATA_TO_RESTORE"
    """The history entry has no row snapshot to restore."""

    CONFLICT = "CONFLICT"

    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    """A backing store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "VERSION_NOT_FOUND",
                "message": "Version not found"
            }
        }
    """

    error: ErrorBody

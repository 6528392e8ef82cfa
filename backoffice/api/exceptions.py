"""API exception hierarchy for consistent error handling.

All API exceptions inherit from BackofficeAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses.
"""

from backoffice.api.models.errors import ErrorCode


class BackofficeAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(BackofficeAPIError):
    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class AuthenticationError(BackofficeAPIError):
    """Raised when the bearer token is missing or cannot be verified."""

    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED


class PermissionDeniedError(BackofficeAPIError):
    """Raised when the caller's role lacks a permission."""

    status_code = 403
    error_code = ErrorCode.FORBIDDEN

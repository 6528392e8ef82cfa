"""Store error hierarchy shared by every backend.

Backends wrap driver-specific exceptions in one of these so callers and the
API layer handle failures the same way regardless of storage.
"""

import re


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the database is unreachable or a query fails at the driver level."""

    pass


class NotFoundError(StoreError):
    """Raised when a specific entity lookup fails.

    Not used for empty search results.
    """

    pass


class ConflictError(StoreError):
    """Raised on unique constraint violation or duplicate trigger creation."""

    pass


class ValidationError(StoreError):
    """Raised on invalid data, such as an unsafe table or column name."""

    pass


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """Return ``name`` if it is a plain SQL identifier, else raise ValidationError.

    Table and column names are interpolated into dynamic SQL, so anything
    beyond letters, digits and underscores is rejected.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid {kind}: {name!r}")
    return name

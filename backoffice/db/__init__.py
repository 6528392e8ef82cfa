"""PostgreSQL connectivity and schema migrations."""

from backoffice.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from backoffice.db.pool import PostgresPool

__all__ = [
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "PostgresPool",
    "StoreError",
    "ValidationError",
]

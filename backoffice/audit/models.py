"""Audit log domain models."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AuditAction:
    """Action names used across the admin console.

    Free-form actions are accepted too; these keep common events consistent.
    """

    LOGIN = "user_login"
    LOGOUT = "user_logout"
    SETTINGS_CHANGE = "settings_changed"
    USER_CREATE = "user_created"
    USER_UPDATE = "user_updated"
    USER_DELETE = "user_deleted"
    ORDER_CREATE = "order_created"
    ORDER_UPDATE = "order_updated"
    ORDER_DELETE = "order_deleted"
    EXPORT_DATA = "data_exported"
    IMPORT_DATA = "data_imported"
    SYSTEM_CONFIG = "system_config_changed"
    SECURITY_EVENT = "security_event"
    ERROR_OCCURRED = "error_occurred"
    LOGS_CLEANED = "audit_logs_cleaned"
    DATA_REVERTED = "data_reverted"


class AuditLogEntry(BaseModel):
    """One user action in the audit trail."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    timestamp: datetime = Field(default_factory=utc_now, description="Event time")
    user_id: str = Field(default="unknown", description="Acting user")
    user_role: str = Field(default="user", description="Role of the acting user")
    action: str = Field(..., min_length=1, description="Action name")
    details: dict[str, Any] = Field(default_factory=dict, description="Action payload")
    ip_address: str | None = None
    user_agent: str | None = None
    session_id: str | None = None


class AuditLogFilter(BaseModel):
    """Criteria for reading audit logs, combined with AND.

    ``user_id`` and ``action`` are case-insensitive substring matches; ``q``
    searches action, user and details at once.
    """

    start_date: datetime | None = None
    end_date: datetime | None = None
    user_id: str | None = None
    action: str | None = None
    q: str | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


class AuditLogStats(BaseModel):
    total: int = 0
    last_24_hours: int = 0
    last_week: int = 0
    top_actions: dict[str, int] = Field(default_factory=dict)
    top_users: dict[str, int] = Field(default_factory=dict)
    oldest_log: datetime | None = None
    newest_log: datetime | None = None


class LogResult(BaseModel):
    """Outcome of a best-effort audit write.

    ``ok`` is False when the write failed; the failure is described in
    ``error`` and never raised.
    """

    ok: bool
    entry: AuditLogEntry | None = None
    error: str | None = None

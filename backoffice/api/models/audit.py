"""Audit log endpoint models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditLogCreate(BaseModel):
    """Body of POST /audit-logs.

    ``action`` is validated by the route so a missing action is reported
    as a plain 400 "Missing action".
    """

    model_config = ConfigDict(populate_by_name=True)

    action: str | None = None
    entity: str | None = None
    details: dict[str, Any] | str | None = None
    user_id: str | None = Field(default=None, alias="userId")
    ip_address: str | None = None
    user_agent: str | None = None
    session_id: str | None = Field(default=None, alias="sessionId")


class AuditLogCreated(BaseModel):
    message: str = "Audit log entry created"
    id: str | None = None


class AuditLogsCleared(BaseModel):
    message: str
    removed: int
    older_than_days: int | None = Field(default=None, serialization_alias="olderThanDays")

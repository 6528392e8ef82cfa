"""Audit trail of admin user actions."""

from backoffice.audit.client import AuditClient, AuditSendResult
from backoffice.audit.export import CSV_HEADER, ExportFormat
from backoffice.audit.logger import AuditLogger
from backoffice.audit.models import (
    AuditAction,
    AuditLogEntry,
    AuditLogFilter,
    AuditLogStats,
    LogResult,
)
from backoffice.audit.store import AuditLogStore

__all__ = [
    "AuditAction",
    "AuditClient",
    "AuditLogEntry",
    "AuditLogFilter",
    "AuditLogStats",
    "AuditLogStore",
    "AuditLogger",
    "AuditSendResult",
    "CSV_HEADER",
    "ExportFormat",
    "LogResult",
]

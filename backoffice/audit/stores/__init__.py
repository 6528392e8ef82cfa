"""Audit log store backends."""

from backoffice.audit.stores.inmemory import RingBufferAuditLogStore
from backoffice.audit.stores.postgres import PostgresAuditLogStore

__all__ = [
    "PostgresAuditLogStore",
    "RingBufferAuditLogStore",
]

"""AuditLogStore abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from backoffice.audit.models import AuditLogEntry, AuditLogFilter, AuditLogStats


class AuditLogStore(ABC):
    """Abstract interface for audit log storage.

    Reads always return entries newest first.
    """

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        pass

    @abstractmethod
    async def list(self, filter: AuditLogFilter) -> list[AuditLogEntry]:
        """Return matching entries, newest first, honouring limit and offset."""
        pass

    @abstractmethod
    async def count(self, filter: AuditLogFilter) -> int:
        """Count matching entries, ignoring limit and offset."""
        pass

    @abstractmethod
    async def clear(self, before: datetime | None = None) -> int:
        """Delete entries older than ``before`` (all when None). Returns the removed count."""
        pass

    @abstractmethod
    async def stats(self, now: datetime, top: int = 10) -> AuditLogStats:
        pass

"""AuditLogger: best-effort recording and querying of user actions."""

import inspect
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any

from backoffice.audit.export import ExportFormat, render
from backoffice.audit.models import (
    AuditAction,
    AuditLogEntry,
    AuditLogFilter,
    AuditLogStats,
    LogResult,
    utc_now,
)
from backoffice.audit.store import AuditLogStore
from backoffice.observability.logging import get_logger
from backoffice.observability.metrics import AUDIT_LOG_WRITES

logger = get_logger(__name__)

AuditListener = Callable[[AuditLogEntry], Awaitable[None] | None]


class AuditLogger:
    """Writes audit entries and notifies subscribers of each successful write.

    ``log`` never raises: failures come back as ``LogResult(ok=False)`` so an
    audit problem cannot break the request that triggered it.
    """

    def __init__(
        self,
        store: AuditLogStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock
        self._listeners: list[AuditListener] = []

    def subscribe(self, listener: AuditListener) -> None:
        """Register a sync or async callable invoked with every written entry."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: AuditListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def log(
        self,
        action: str,
        details: dict[str, Any] | None = None,
        user_id: str | None = None,
        *,
        user_role: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
    ) -> LogResult:
        try:
            entry = AuditLogEntry(
                timestamp=self._clock(),
                user_id=user_id or "unknown",
                user_role=user_role or "user",
                action=action,
                details=details or {},
                ip_address=ip_address,
                user_agent=user_agent,
                session_id=session_id,
            )
            await self._store.append(entry)
        except Exception as e:
            AUDIT_LOG_WRITES.labels(outcome="failed").inc()
            logger.warning("audit_log_write_failed", action=action, error=str(e))
            return LogResult(ok=False, error=str(e))

        AUDIT_LOG_WRITES.labels(outcome="written").inc()
        await self._notify(entry)
        return LogResult(ok=True, entry=entry)

    async def _notify(self, entry: AuditLogEntry) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(entry)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning("audit_listener_failed", action=entry.action, error=str(e))

    async def get_logs(self, filter: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        return await self._store.list(filter or AuditLogFilter())

    async def count_logs(self, filter: AuditLogFilter | None = None) -> int:
        return await self._store.count(filter or AuditLogFilter())

    async def export_logs(
        self,
        format: ExportFormat | str = ExportFormat.CSV,
        filter: AuditLogFilter | None = None,
    ) -> str:
        """Export matching logs as CSV or JSON text."""
        entries = await self.get_logs(filter)
        return render(entries, format)

    async def clear_logs(self, older_than_days: int | None = None) -> int:
        """Delete logs and return how many were removed.

        With a positive ``older_than_days`` only entries older than the cutoff
        go, and the cleanup itself is logged as ``audit_logs_cleaned``. None
        and 0 both clear everything.
        """
        if not older_than_days:
            removed = await self._store.clear()
            logger.info("audit_logs_cleared", removed=removed)
            return removed

        if older_than_days < 0:
            raise ValueError("older_than_days must not be negative")

        cutoff = self._clock() - timedelta(days=older_than_days)
        removed = await self._store.clear(before=cutoff)
        await self.log(
            AuditAction.LOGS_CLEANED,
            {"olderThanDays": older_than_days, "removedCount": removed},
        )
        return removed

    async def get_log_stats(self) -> AuditLogStats:
        return await self._store.stats(self._clock())

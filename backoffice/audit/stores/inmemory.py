"""Ring-buffer implementation of AuditLogStore."""

import asyncio
from collections import Counter, deque
from datetime import datetime, timedelta

from backoffice.audit.models import AuditLogEntry, AuditLogFilter, AuditLogStats
from backoffice.audit.store import AuditLogStore

DEFAULT_CAPACITY = 1000


def matches(entry: AuditLogEntry, filter: AuditLogFilter) -> bool:
    """Whether ``entry`` satisfies every criterion of ``filter``."""
    if filter.start_date is not None and entry.timestamp < filter.start_date:
        return False
    if filter.end_date is not None and entry.timestamp > filter.end_date:
        return False
    if filter.user_id and filter.user_id.lower() not in entry.user_id.lower():
        return False
    if filter.action and filter.action.lower() not in entry.action.lower():
        return False
    if filter.q:
        needle = filter.q.lower()
        haystack = f"{entry.action}\n{entry.user_id}\n{entry.details}".lower()
        if needle not in haystack:
            return False
    return True


class RingBufferAuditLogStore(AuditLogStore):
    """Capped in-memory audit log.

    Newest entries sit at index 0; once ``capacity`` is reached each append
    evicts the oldest entry. Mutations are serialised with an asyncio.Lock.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._entries: deque[AuditLogEntry] = deque(maxlen=capacity)
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or DEFAULT_CAPACITY

    def __len__(self) -> int:
        return len(self._entries)

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        async with self._lock:
            self._entries.appendleft(entry)
        return entry

    async def list(self, filter: AuditLogFilter) -> list[AuditLogEntry]:
        results = [entry for entry in self._entries if matches(entry, filter)]
        end = filter.offset + filter.limit if filter.limit is not None else None
        return results[filter.offset:end]

    async def count(self, filter: AuditLogFilter) -> int:
        return sum(1 for entry in self._entries if matches(entry, filter))

    async def clear(self, before: datetime | None = None) -> int:
        async with self._lock:
            if before is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            kept = [entry for entry in self._entries if entry.timestamp > before]
            removed = len(self._entries) - len(kept)
            self._entries.clear()
            self._entries.extend(kept)
            return removed

    async def stats(self, now: datetime, top: int = 10) -> AuditLogStats:
        entries = list(self._entries)
        if not entries:
            return AuditLogStats()

        day_ago = now - timedelta(days=1)
        week_ago = now - timedelta(days=7)
        actions = Counter(entry.action for entry in entries)
        users = Counter(entry.user_id for entry in entries)

        return AuditLogStats(
            total=len(entries),
            last_24_hours=sum(1 for e in entries if e.timestamp > day_ago),
            last_week=sum(1 for e in entries if e.timestamp > week_ago),
            top_actions=dict(actions.most_common(top)),
            top_users=dict(users.most_common(top)),
            oldest_log=entries[-1].timestamp,
            newest_log=entries[0].timestamp,
        )

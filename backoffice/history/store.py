"""HistoryStore abstract interface."""

from abc import ABC, abstractmethod

from backoffice.history.models import (
    ActionSummary,
    HistoryFilter,
    HistoryPage,
    HistoryRecord,
    HistoryStats,
    TimelineEntry,
)


class HistoryStore(ABC):
    """Abstract interface for the append-only data_history table."""

    @abstractmethod
    async def save(self, record: HistoryRecord) -> HistoryRecord:
        """Append a record and return it with its assigned id."""
        pass

    @abstractmethod
    async def get(self, history_id: int) -> HistoryRecord | None:
        pass

    @abstractmethod
    async def list_history(self, filter: HistoryFilter) -> HistoryPage:
        """List records newest first, with the total matching count."""
        pass

    @abstractmethod
    async def get_record_history(
        self,
        table_name: str,
        record_id: str,
        *,
        limit: int = 50,
    ) -> list[HistoryRecord]:
        """List the history of one row, newest first."""
        pass

    @abstractmethod
    async def get_change_timeline(
        self,
        table_name: str,
        record_id: str,
    ) -> list[TimelineEntry]:
        """Condensed history of one row in chronological order."""
        pass

    @abstractmethod
    async def get_record_change_summary(
        self,
        table_name: str,
        record_id: str,
    ) -> list[ActionSummary]:
        """Per-action counts, first/last change time and distinct users."""
        pass

    @abstractmethod
    async def get_latest_version(
        self,
        table_name: str,
        record_id: str,
    ) -> HistoryRecord | None:
        pass

    @abstractmethod
    async def get_stats(self, days: int = 30, table_name: str | None = None) -> HistoryStats:
        """Per table/action counts and a daily trend over the last ``days`` days."""
        pass

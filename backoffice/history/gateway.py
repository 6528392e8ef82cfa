"""RecordGateway: access to the tracked tables themselves.

Besides writing rows back on revert, the gateway owns the per-table
tracking switch (the ``track_<table>_changes`` triggers).
"""

from abc import ABC, abstractmethod
from typing import Any

from backoffice.history.models import TrackingResult


class RecordGateway(ABC):
    """Abstract interface over tracked tables."""

    @abstractmethod
    async def update_record(
        self,
        table_name: str,
        record_id: str,
        data: dict[str, Any],
        *,
        acting_user_id: str | None = None,
    ) -> dict[str, Any]:
        """Overwrite every column of ``data`` except ``id`` and return the updated row.

        The write is recorded in history under ``acting_user_id``. Raises
        NotFoundError when the row does not exist.
        """
        pass

    @abstractmethod
    async def enable_table_tracking(self, table_name: str) -> TrackingResult:
        """Start recording changes to ``table_name``. Idempotent."""
        pass

    @abstractmethod
    async def disable_table_tracking(self, table_name: str) -> TrackingResult:
        """Stop recording changes to ``table_name``. Idempotent."""
        pass

    @abstractmethod
    async def get_tracked_tables(self) -> list[str]:
        pass

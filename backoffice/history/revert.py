"""RevertEngine: restore rows to the state captured by a history entry."""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from backoffice.db.errors import StoreError
from backoffice.history.diff import compare_versions
from backoffice.history.errors import NoDataToRestoreError, VersionNotFoundError
from backoffice.history.gateway import RecordGateway
from backoffice.history.models import (
    BulkRevertResult,
    HistoryRecord,
    RevertFailure,
    RevertSuccess,
    VersionComparison,
)
from backoffice.history.store import HistoryStore
from backoffice.observability.logging import get_logger
from backoffice.observability.metrics import HISTORY_REVERTS

logger = get_logger(__name__)


def restorable_state(record: HistoryRecord) -> dict[str, Any] | None:
    """The row state a history entry restores: its new data, else its old data."""
    return record.new_data if record.new_data is not None else record.old_data


class RevertEngine:
    """Applies history entries back onto their tracked tables.

    The write goes through the record gateway with the acting user attached,
    so the revert itself appears in history.

    ``on_reverted`` is awaited with the table name after each successful
    write, so caches over that table can be dropped.
    """

    def __init__(
        self,
        history: HistoryStore,
        gateway: RecordGateway,
        on_reverted: Callable[[str], Awaitable[None]] | None = None,
    ) -> None:
        self._history = history
        self._gateway = gateway
        self._on_reverted = on_reverted

    async def _load(self, history_id: int) -> HistoryRecord:
        record = await self._history.get(history_id)
        if record is None:
            raise VersionNotFoundError(history_id)
        return record

    async def revert_to_version(
        self,
        history_id: int,
        acting_user_id: str | None = None,
    ) -> dict[str, Any]:
        """Restore the row behind ``history_id`` and return the updated row.

        Raises:
            VersionNotFoundError: No history entry with that id.
            NoDataToRestoreError: The entry has neither old nor new data.
        """
        try:
            record = await self._load(history_id)
            data = restorable_state(record)
            if data is None:
                raise NoDataToRestoreError(history_id)
            restored = await self._gateway.update_record(
                record.table_name,
                record.record_id,
                data,
                acting_user_id=acting_user_id,
            )
        except StoreError:
            HISTORY_REVERTS.labels(outcome="failed").inc()
            raise

        HISTORY_REVERTS.labels(outcome="success").inc()
        logger.info(
            "record_reverted",
            history_id=history_id,
            table_name=record.table_name,
            record_id=record.record_id,
            acting_user_id=acting_user_id,
        )
        await self._notify(record.table_name)
        return restored

    async def _notify(self, table_name: str) -> None:
        if self._on_reverted is None:
            return
        try:
            await self._on_reverted(table_name)
        except Exception as e:
            logger.warning("revert_hook_failed", table_name=table_name, error=str(e))

    async def bulk_revert(
        self,
        history_ids: Iterable[int],
        acting_user_id: str | None = None,
    ) -> BulkRevertResult:
        """Revert each entry independently; one failure never stops the rest."""
        result = BulkRevertResult()
        for history_id in history_ids:
            try:
                record = await self.revert_to_version(history_id, acting_user_id)
            except StoreError as e:
                logger.warning("revert_failed", history_id=history_id, error=str(e))
                result.failed.append(RevertFailure(history_id=history_id, error=str(e)))
            else:
                result.success.append(RevertSuccess(history_id=history_id, record=record))
        return result

    async def compare_history_versions(
        self,
        history_id1: int,
        history_id2: int,
    ) -> VersionComparison:
        """Return both entries and the fields whose restorable states differ."""
        first = await self._load(history_id1)
        second = await self._load(history_id2)
        return VersionComparison(
            version1=first,
            version2=second,
            differences=compare_versions(restorable_state(first), restorable_state(second)),
        )

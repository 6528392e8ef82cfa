"""ChangeRecorder: application-level history capture."""

from typing import Any

from backoffice.history.diff import compute_changed_fields
from backoffice.history.models import HistoryAction, HistoryRecord
from backoffice.history.store import HistoryStore
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)


class ChangeRecorder:
    """Builds one HistoryRecord per mutated row and appends it to the store.

    Postgres tables are recorded by the track_data_changes() trigger instead;
    this is the path for backends without triggers.
    """

    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    async def record(
        self,
        *,
        table_name: str,
        record_id: str,
        action: HistoryAction,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
        changed_by: str | None = None,
    ) -> HistoryRecord:
        record = HistoryRecord(
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            old_data=old_data,
            new_data=new_data,
            changed_fields=compute_changed_fields(old_data, new_data),
            changed_by=changed_by,
        )
        saved = await self._store.save(record)
        logger.debug(
            "history_recorded",
            table_name=table_name,
            record_id=record.record_id,
            action=action.value,
            history_id=saved.id,
        )
        return saved

"""In-memory implementation of SettingsStore."""

from collections.abc import Sequence

from backoffice.history.stores.inmemory import InMemoryRecordGateway
from backoffice.site_settings.models import SETTINGS_TABLE, SettingEntry, utc_now
from backoffice.site_settings.store import SettingsStore

TABLE_NAME = SETTINGS_TABLE


class InMemorySettingsStore(SettingsStore):
    """In-memory implementation of SettingsStore for testing and development.

    Rows live in an InMemoryRecordGateway table named ``settings`` so writes
    are recorded in history whenever tracking is enabled for that table, and
    history entries can be reverted onto them.
    """

    def __init__(self, tables: InMemoryRecordGateway | None = None) -> None:
        self._tables = tables or InMemoryRecordGateway()
        self._next_id = 1

    def _all(self) -> list[SettingEntry]:
        return [SettingEntry.model_validate(row) for row in self._tables.rows(TABLE_NAME)]

    async def list_entries(
        self,
        *,
        category: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[SettingEntry]:
        wanted = set(keys) if keys else None
        results = [
            entry for entry in self._all()
            if (category is None or entry.category == category)
            and (wanted is None or entry.key in wanted)
        ]
        results.sort(key=lambda e: (e.category, e.key))
        return results

    async def get_entry(self, key: str) -> SettingEntry | None:
        for entry in self._all():
            if entry.key == key:
                return entry
        return None

    async def save_entry(self, entry: SettingEntry) -> SettingEntry:
        existing = await self.get_entry(entry.key)
        if existing is not None:
            row = entry.model_copy(update={"id": existing.id}).model_dump(mode="json")
            stored = await self._tables.update_row(
                TABLE_NAME, str(existing.id), row, changed_by=entry.updated_by
            )
        else:
            new_id = entry.id or self._next_id
            self._next_id = max(self._next_id, new_id) + 1
            row = entry.model_copy(update={"id": new_id}).model_dump(mode="json")
            stored = await self._tables.insert_row(TABLE_NAME, row, changed_by=entry.updated_by)
        return SettingEntry.model_validate(stored)

    async def update_values(
        self,
        values: dict[str, str],
        *,
        updated_by: str | None = None,
    ) -> list[str]:
        by_key = {entry.key: entry for entry in self._all()}
        written: list[str] = []
        now = utc_now().isoformat()
        for key, raw in values.items():
            existing = by_key.get(key)
            if existing is None:
                continue
            await self._tables.update_row(
                TABLE_NAME,
                str(existing.id),
                {"value": raw, "updated_at": now, "updated_by": updated_by},
                changed_by=updated_by,
            )
            written.append(key)
        return written

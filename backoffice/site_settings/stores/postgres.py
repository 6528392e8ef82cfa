"""PostgreSQL implementation of SettingsStore.

Writes to the settings table are captured by the track_settings_changes
trigger when tracking is enabled for it; the acting user reaches the trigger
through ``app.current_user_id``.
"""

from collections.abc import Sequence
from typing import Any

from backoffice.db.errors import ConnectionError, StoreError
from backoffice.db.pool import PostgresPool
from backoffice.observability.logging import get_logger
from backoffice.site_settings.models import DataType, SettingEntry
from backoffice.site_settings.store import SettingsStore

logger = get_logger(__name__)

_COLUMNS = "id, key, value, category, data_type, description, updated_at, updated_by"


class PostgresSettingsStore(SettingsStore):
    """PostgreSQL implementation of SettingsStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def list_entries(
        self,
        *,
        category: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[SettingEntry]:
        query = f"SELECT {_COLUMNS} FROM settings WHERE 1=1"
        params: list[Any] = []

        if category is not None:
            params.append(category)
            query += f" AND category = ${len(params)}"

        if keys:
            params.append(list(keys))
            query += f" AND key = ANY(${len(params)}::text[])"

        query += " ORDER BY category, key"

        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
                return [self._row_to_entry(row) for row in rows]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_list_settings_error", category=category, error=str(e))
            raise ConnectionError(f"Failed to list settings: {e}", cause=e) from e

    async def get_entry(self, key: str) -> SettingEntry | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM settings WHERE key = $1",
                    key,
                )
                return self._row_to_entry(row) if row else None
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_get_setting_error", key=key, error=str(e))
            raise ConnectionError(f"Failed to get setting: {e}", cause=e) from e

    async def save_entry(self, entry: SettingEntry) -> SettingEntry:
        try:
            async with self._pool.transaction(entry.updated_by) as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO settings (key, value, category, data_type, description, updated_by)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        category = EXCLUDED.category,
                        data_type = EXCLUDED.data_type,
                        description = EXCLUDED.description,
                        updated_at = NOW(),
                        updated_by = EXCLUDED.updated_by
                    RETURNING {_COLUMNS}
                    """,
                    entry.key,
                    entry.value,
                    entry.category,
                    entry.data_type.value,
                    entry.description,
                    entry.updated_by,
                )
                logger.debug("setting_saved", key=entry.key)
                return self._row_to_entry(row)
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_save_setting_error", key=entry.key, error=str(e))
            raise ConnectionError(f"Failed to save setting: {e}", cause=e) from e

    async def update_values(
        self,
        values: dict[str, str],
        *,
        updated_by: str | None = None,
    ) -> list[str]:
        written: list[str] = []
        try:
            async with self._pool.transaction(updated_by) as conn:
                for key, raw in values.items():
                    result = await conn.fetchval(
                        """
                        UPDATE settings
                        SET value = $1, updated_at = NOW(), updated_by = $2
                        WHERE key = $3
                        RETURNING key
                        """,
                        raw,
                        updated_by,
                        key,
                    )
                    if result is not None:
                        written.append(key)
            return written
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_update_settings_error", keys=list(values), error=str(e))
            raise ConnectionError(f"Failed to update settings: {e}", cause=e) from e

    def _row_to_entry(self, row: Any) -> SettingEntry:
        try:
            data_type = DataType(row["data_type"])
        except ValueError:
            data_type = DataType.STRING
        return SettingEntry(
            id=row["id"],
            key=row["key"],
            value=row["value"] or "",
            category=row["category"],
            data_type=data_type,
            description=row["description"],
            updated_at=row["updated_at"],
            updated_by=row["updated_by"],
        )

"""SettingsService: typed reads and partial writes over the settings table."""

import json
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from backoffice.observability.logging import get_logger
from backoffice.observability.metrics import SETTINGS_CACHE_LOOKUPS, SETTINGS_UPDATED
from backoffice.site_settings.cache import SettingsCache
from backoffice.site_settings.codec import decode, encode_python, plain
from backoffice.site_settings.defaults import DEFAULT_SETTINGS
from backoffice.site_settings.models import (
    SETTINGS_TABLE,
    SettingEntry,
    SettingsSnapshot,
    SettingsUpdateResult,
)
from backoffice.site_settings.store import SettingsStore

logger = get_logger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300


def cache_key(category: str | None = None, keys: Sequence[str] | None = None) -> str:
    """Build the cache key for a settings query.

    Key format: config:{category|all}:{comma-joined keys|all}
    """
    key_part = ",".join(keys) if keys else "all"
    return f"config:{category or 'all'}:{key_part}"


class SettingsService:
    """Reads settings as a flat typed map and applies partial updates.

    Reads go through the cache; every write clears the whole cache namespace.
    """

    def __init__(
        self,
        store: SettingsStore,
        cache: SettingsCache,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._cache = cache
        self._cache_ttl_seconds = cache_ttl_seconds

    async def get_all(
        self,
        category: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> SettingsSnapshot:
        """Return ``{key: typed value}`` for the matching settings."""
        key = cache_key(category, keys)

        cached = await self._cache.get(key)
        if cached is not None:
            SETTINGS_CACHE_LOOKUPS.labels(result="hit").inc()
            payload = json.loads(cached)
            last_updated = payload.get("last_updated")
            return SettingsSnapshot(
                values=payload["values"],
                last_updated=datetime.fromisoformat(last_updated) if last_updated else None,
                cache_hit=True,
            )

        SETTINGS_CACHE_LOOKUPS.labels(result="miss").inc()
        entries = await self._store.list_entries(category=category, keys=keys)
        snapshot = self._assemble(entries)

        payload = {
            "values": snapshot.values,
            "last_updated": snapshot.last_updated.isoformat() if snapshot.last_updated else None,
        }
        await self._cache.set(key, json.dumps(payload), self._cache_ttl_seconds)
        return snapshot

    async def set_all(
        self,
        values: dict[str, Any],
        *,
        updated_by: str | None = None,
    ) -> SettingsUpdateResult:
        """Write a partial map of settings, encoding each value per its stored type.

        Keys with no existing row are skipped; new settings are never created here.
        """
        if not values:
            return SettingsUpdateResult()

        entries = await self._store.list_entries(keys=list(values))
        types = {entry.key: entry.data_type for entry in entries}

        raw: dict[str, str] = {}
        skipped: list[str] = []
        for key, value in values.items():
            data_type = types.get(key)
            if data_type is None:
                skipped.append(key)
                continue
            raw[key] = encode_python(value, data_type)

        if skipped:
            logger.warning("settings_unknown_keys_skipped", keys=skipped)

        written = await self._store.update_values(raw, updated_by=updated_by) if raw else []

        await self._cache.clear_namespace()
        SETTINGS_UPDATED.inc(len(written))
        logger.info("settings_updated", keys=written, updated_by=updated_by)

        return SettingsUpdateResult(
            updated=written,
            skipped=skipped + [k for k in raw if k not in written],
        )

    async def on_table_changed(self, table_name: str) -> None:
        """Drop cached reads when rows of the settings table were written elsewhere."""
        if table_name == SETTINGS_TABLE:
            await self._cache.clear_namespace()
            logger.debug("settings_cache_invalidated", table_name=table_name)

    async def seed_defaults(self, defaults: Iterable[SettingEntry] = DEFAULT_SETTINGS) -> int:
        """Insert catalogue entries whose key is not stored yet. Returns the count inserted."""
        inserted = 0
        for entry in defaults:
            if await self._store.get_entry(entry.key) is None:
                await self._store.save_entry(entry)
                inserted += 1
        if inserted:
            await self._cache.clear_namespace()
            logger.info("settings_defaults_seeded", count=inserted)
        return inserted

    @staticmethod
    def _assemble(entries: Iterable[SettingEntry]) -> SettingsSnapshot:
        values: dict[str, Any] = {}
        last_updated: datetime | None = None
        for entry in entries:
            values[entry.key] = plain(decode(entry.value, entry.data_type))
            if last_updated is None or entry.updated_at > last_updated:
                last_updated = entry.updated_at
        return SettingsSnapshot(values=values, last_updated=last_updated)

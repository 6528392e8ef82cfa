"""SettingsStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from backoffice.site_settings.models import SettingEntry


class SettingsStore(ABC):
    """Abstract interface for the key/value settings table.

    Values cross this boundary in raw string form; typing is the codec's job.
    """

    @abstractmethod
    async def list_entries(
        self,
        *,
        category: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[SettingEntry]:
        """List settings ordered by category then key, optionally filtered."""
        pass

    @abstractmethod
    async def get_entry(self, key: str) -> SettingEntry | None:
        """Get a single setting by key."""
        pass

    @abstractmethod
    async def save_entry(self, entry: SettingEntry) -> SettingEntry:
        """Insert or replace a setting row (used for seeding)."""
        pass

    @abstractmethod
    async def update_values(
        self,
        values: dict[str, str],
        *,
        updated_by: str | None = None,
    ) -> list[str]:
        """Write raw values for existing keys.

        Keys without a row are ignored. Returns the keys actually written.
        """
        pass

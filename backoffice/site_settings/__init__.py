"""Site settings: typed key/value configuration edited from the admin console."""

from backoffice.site_settings.cache import (
    InMemorySettingsCache,
    RedisSettingsCache,
    SettingsCache,
)
from backoffice.site_settings.models import (
    DataType,
    SettingCategory,
    SettingEntry,
    SettingsSnapshot,
    SettingsUpdateResult,
)
from backoffice.site_settings.service import SettingsService, cache_key
from backoffice.site_settings.store import SettingsStore

__all__ = [
    "DataType",
    "InMemorySettingsCache",
    "RedisSettingsCache",
    "SettingCategory",
    "SettingEntry",
    "SettingsCache",
    "SettingsService",
    "SettingsSnapshot",
    "SettingsStore",
    "SettingsUpdateResult",
    "cache_key",
]

"""Settings store backends."""

from backoffice.site_settings.store import SettingsStore
from backoffice.site_settings.stores.inmemory import InMemorySettingsStore
from backoffice.site_settings.stores.postgres import PostgresSettingsStore

__all__ = [
    "InMemorySettingsStore",
    "PostgresSettingsStore",
    "SettingsStore",
]

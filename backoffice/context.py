"""Application context: every long-lived service, built once per process.

The API attaches one AppContext to ``app.state.context`` at startup and
route dependencies read from it, so tests can build their own context or
override single dependencies.
"""

import os
from dataclasses import dataclass, field

import redis.asyncio as redis

from backoffice.audit.logger import AuditLogger
from backoffice.audit.store import AuditLogStore
from backoffice.audit.stores.inmemory import RingBufferAuditLogStore
from backoffice.audit.stores.postgres import PostgresAuditLogStore
from backoffice.config.settings import Settings
from backoffice.db.pool import PostgresPool
from backoffice.history.gateway import RecordGateway
from backoffice.history.recorder import ChangeRecorder
from backoffice.history.revert import RevertEngine
from backoffice.history.store import HistoryStore
from backoffice.history.stores.inmemory import InMemoryHistoryStore, InMemoryRecordGateway
from backoffice.history.stores.postgres import PostgresHistoryStore, PostgresRecordGateway
from backoffice.observability.logging import get_logger
from backoffice.site_settings.cache import InMemorySettingsCache, RedisSettingsCache, SettingsCache
from backoffice.site_settings.service import SettingsService
from backoffice.site_settings.store import SettingsStore
from backoffice.site_settings.stores.inmemory import InMemorySettingsStore
from backoffice.site_settings.stores.postgres import PostgresSettingsStore

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Services shared by every request."""

    settings: Settings
    settings_store: SettingsStore
    settings_cache: SettingsCache
    settings_service: SettingsService
    history_store: HistoryStore
    record_gateway: RecordGateway
    revert_engine: RevertEngine
    audit_store: AuditLogStore
    audit_logger: AuditLogger
    pool: PostgresPool | None = None
    redis_client: redis.Redis | None = field(default=None, repr=False)

    async def close(self) -> None:
        """Release pooled connections."""
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
        if self.pool is not None:
            await self.pool.close()
        logger.info("app_context_closed")


def _build_cache(settings: Settings) -> tuple[SettingsCache, redis.Redis | None]:
    cache_config = settings.storage.cache
    if cache_config.backend == "redis":
        redis_url = cache_config.redis_url or os.environ.get("REDIS_URL", "redis://localhost:6379")
        client = redis.from_url(redis_url, decode_responses=True)
        logger.info("settings_cache_initialized", backend="redis", url=redis_url.split("@")[-1])
        return RedisSettingsCache(client, key_prefix=settings.app_name), client
    logger.info("settings_cache_initialized", backend="inmemory")
    return InMemorySettingsCache(), None


def build_inmemory_context(settings: Settings) -> AppContext:
    """Wire every service to in-memory backends."""
    history_store = InMemoryHistoryStore()
    tables = InMemoryRecordGateway(recorder=ChangeRecorder(history_store))
    settings_store = InMemorySettingsStore(tables)
    cache, redis_client = _build_cache(settings)
    audit_store = RingBufferAuditLogStore(capacity=settings.audit.max_entries)
    service = SettingsService(
        settings_store, cache, cache_ttl_seconds=settings.storage.cache.ttl_seconds
    )

    return AppContext(
        settings=settings,
        settings_store=settings_store,
        settings_cache=cache,
        settings_service=service,
        history_store=history_store,
        record_gateway=tables,
        revert_engine=RevertEngine(history_store, tables, on_reverted=service.on_table_changed),
        audit_store=audit_store,
        audit_logger=AuditLogger(audit_store),
        redis_client=redis_client,
    )


def build_postgres_context(settings: Settings, pool: PostgresPool) -> AppContext:
    """Wire every service to PostgreSQL through ``pool``."""
    settings_store = PostgresSettingsStore(pool)
    history_store = PostgresHistoryStore(pool)
    gateway = PostgresRecordGateway(pool)
    cache, redis_client = _build_cache(settings)
    audit_store = PostgresAuditLogStore(pool)
    service = SettingsService(
        settings_store, cache, cache_ttl_seconds=settings.storage.cache.ttl_seconds
    )

    return AppContext(
        settings=settings,
        settings_store=settings_store,
        settings_cache=cache,
        settings_service=service,
        history_store=history_store,
        record_gateway=gateway,
        revert_engine=RevertEngine(history_store, gateway, on_reverted=service.on_table_changed),
        audit_store=audit_store,
        audit_logger=AuditLogger(audit_store),
        pool=pool,
        redis_client=redis_client,
    )


async def create_context(settings: Settings) -> AppContext:
    """Build the context for the configured backend and run startup tasks.

    Startup enables tracking on ``storage.tracked_tables`` and, when
    ``storage.seed_defaults`` is set, inserts missing default settings.
    """
    if settings.storage.backend == "postgres":
        pool = PostgresPool.from_config(settings.storage.postgres)
        await pool.connect()
        context = build_postgres_context(settings, pool)
    else:
        context = build_inmemory_context(settings)

    for table_name in settings.storage.tracked_tables:
        result = await context.record_gateway.enable_table_tracking(table_name)
        logger.debug("startup_tracking", table_name=table_name, changed=result.changed)

    if settings.storage.seed_defaults:
        await context.settings_service.seed_defaults()

    logger.info("app_context_created", backend=settings.storage.backend)
    return context

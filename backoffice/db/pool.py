"""PostgreSQL connection pool management.

Provides a centralized connection pool for all PostgreSQL stores.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from backoffice.config.models.storage import PostgresConfig
from backoffice.db.errors import ConnectionError
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresPool:
    """Manages an asyncpg connection pool with health checks.

    Usage:
        pool = PostgresPool(dsn="postgresql://...")
        await pool.connect()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch("SELECT key, value FROM settings")
        finally:
            await pool.close()
    """

    def __init__(
        self,
        dsn: str | None = None,
        min_size: int = 1,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        command_timeout: float = 60.0,
    ) -> None:
        self._dsn = dsn or self._get_dsn_from_env()
        self._min_size = min_size
        self._max_size = max_size
        self._max_inactive_connection_lifetime = max_inactive_connection_lifetime
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_config(cls, config: PostgresConfig) -> "PostgresPool":
        """Build a pool from the storage.postgres config section."""
        return cls(
            dsn=config.dsn,
            min_size=config.min_pool_size,
            max_size=config.max_pool_size,
            max_inactive_connection_lifetime=config.max_inactive_connection_lifetime,
            command_timeout=config.command_timeout,
        )

    @staticmethod
    def _get_dsn_from_env() -> str:
        """Get database DSN from environment variables."""
        dsn = os.environ.get("BACKOFFICE_DATABASE_URL") or os.environ.get("DATABASE_URL")
        if dsn:
            return dsn

        host = os.environ.get("POSTGRES_HOST", "localhost")
        port = os.environ.get("POSTGRES_PORT", "5432")
        user = os.environ.get("POSTGRES_USER", "backoffice")
        password = os.environ.get("POSTGRES_PASSWORD", "backoffice")
        database = os.environ.get("POSTGRES_DB", "backoffice")

        return f"postgresql://{user}:{password}@{host}:{port}/{database}"

    async def connect(self) -> None:
        """Initialize the connection pool."""
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                max_inactive_connection_lifetime=self._max_inactive_connection_lifetime,
                command_timeout=self._command_timeout,
            )
            logger.info(
                "postgres_pool_connected",
                min_size=self._min_size,
                max_size=self._max_size,
            )
        except Exception as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection from the pool.

        Auto-connects if not already connected.
        """
        if self._pool is None:
            await self.connect()

        try:
            async with self._pool.acquire() as connection:
                yield connection
        except asyncpg.PostgresError as e:
            logger.error("postgres_connection_error", error=str(e))
            raise ConnectionError(f"PostgreSQL error: {e}", cause=e) from e

    @asynccontextmanager
    async def transaction(self, acting_user_id: str | None = None) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection inside a transaction.

        When ``acting_user_id`` is given it is exposed to the
        ``track_data_changes()`` trigger as ``app.current_user_id`` for the
        duration of the transaction only.
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                if acting_user_id:
                    await conn.execute(
                        "SELECT set_config('app.current_user_id', $1, true)",
                        str(acting_user_id),
                    )
                yield conn

    async def health_check(self) -> bool:
        """Return True if the pool is connected and responsive."""
        if self._pool is None:
            return False

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

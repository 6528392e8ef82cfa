"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]
CacheBackendType = Literal["inmemory", "redis"]


class PostgresConfig(BaseModel):
    """PostgreSQL connection pool configuration."""

    dsn: str | None = Field(
        default=None,
        description="Connection URL (falls back to DATABASE_URL / POSTGRES_* env vars)",
    )
    min_pool_size: int = Field(
        default=1,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=10,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class SettingsCacheConfig(BaseModel):
    """Cache for assembled settings responses."""

    backend: CacheBackendType = Field(default="inmemory", description="Cache backend")
    ttl_seconds: int = Field(
        default=300,
        ge=0,
        description="Time-to-live for cached settings responses",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis URL (falls back to REDIS_URL env var)",
    )


class StorageConfig(BaseModel):
    """Storage configuration for settings, history and audit backends."""

    backend: BackendType = Field(
        default="postgres",
        description="Backend for settings, data history and audit logs",
    )
    postgres: PostgresConfig = Field(
        default_factory=PostgresConfig,
        description="PostgreSQL settings",
    )
    cache: SettingsCacheConfig = Field(
        default_factory=SettingsCacheConfig,
        description="Settings response cache",
    )
    tracked_tables: list[str] = Field(
        default=["settings"],
        description="Tables whose changes are recorded in data_history; tracking is enabled at startup",
    )
    seed_defaults: bool = Field(
        default=True,
        description="Insert missing default settings at startup",
    )

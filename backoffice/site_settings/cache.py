"""Cache for assembled settings responses.

Entries live under a single ``settings`` namespace that is dropped as a
whole on every settings write.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from redis.asyncio import Redis

from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

NAMESPACE = "settings"


class SettingsCache(ABC):
    """Abstract interface for the settings response cache."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the cached payload for ``key`` or None when absent/expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Cache ``value`` under ``key`` for ``ttl_seconds``."""
        pass

    @abstractmethod
    async def clear_namespace(self) -> None:
        """Drop every cached settings payload."""
        pass


class InMemorySettingsCache(SettingsCache):
    """Process-local TTL cache."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        item = self._entries.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        self._entries[key] = (self._clock() + ttl_seconds, value)

    async def clear_namespace(self) -> None:
        self._entries.clear()


class RedisSettingsCache(SettingsCache):
    """Redis-backed cache shared between workers.

    Key format: {prefix}:{namespace}:{key}
    """

    def __init__(self, redis: Redis, key_prefix: str = "backoffice") -> None:
        self._redis = redis
        self._key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}:{NAMESPACE}:{key}"

    async def get(self, key: str) -> str | None:
        value = await self._redis.get(self._make_key(key))
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        await self._redis.set(self._make_key(key), value, ex=ttl_seconds)

    async def clear_namespace(self) -> None:
        pattern = self._make_key("*")
        keys = [key async for key in self._redis.scan_iter(match=pattern)]
        if keys:
            await self._redis.delete(*keys)
        logger.debug("settings_cache_cleared", keys=len(keys))

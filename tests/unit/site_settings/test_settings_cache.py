"""Tests for settings cache backends."""

from unittest.mock import AsyncMock, MagicMock

from backoffice.site_settings.cache import InMemorySettingsCache, RedisSettingsCache


class TestInMemorySettingsCache:
    async def test_get_missing(self) -> None:
        assert await InMemorySettingsCache().get("k") is None

    async def test_set_and_expire(self) -> None:
        now = [0.0]
        cache = InMemorySettingsCache(clock=lambda: now[0])
        await cache.set("k", "v", ttl_seconds=10)
        assert await cache.get("k") == "v"
        now[0] = 10.0
        assert await cache.get("k") is None

    async def test_zero_ttl_disables_caching(self) -> None:
        cache = InMemorySettingsCache()
        await cache.set("k", "v", ttl_seconds=0)
        assert await cache.get("k") is None

    async def test_clear_namespace(self) -> None:
        cache = InMemorySettingsCache()
        await cache.set("a", "1", 60)
        await cache.set("b", "2", 60)
        await cache.clear_namespace()
        assert await cache.get("a") is None
        assert await cache.get("b") is None


class AsyncIter:
    def __init__(self, items: list[str]) -> None:
        self._items = list(items)

    def __aiter__(self) -> "AsyncIter":
        return self

    async def __anext__(self) -> str:
        if not self._items:
            raise StopAsyncIteration
        return self._items.pop(0)


class TestRedisSettingsCache:
    async def test_keys_are_prefixed(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = b"payload"
        cache = RedisSettingsCache(redis, key_prefix="bo")

        assert await cache.get("config:all:all") == "payload"
        redis.get.assert_awaited_once_with("bo:settings:config:all:all")

    async def test_set_uses_ttl(self) -> None:
        redis = AsyncMock()
        cache = RedisSettingsCache(redis)
        await cache.set("config:all:all", "{}", ttl_seconds=300)
        redis.set.assert_awaited_once_with("backoffice:settings:config:all:all", "{}", ex=300)

    async def test_clear_namespace_deletes_matching_keys(self) -> None:
        redis = MagicMock()
        redis.scan_iter.return_value = AsyncIter(["backoffice:settings:a", "backoffice:settings:b"])
        redis.delete = AsyncMock()
        cache = RedisSettingsCache(redis)

        await cache.clear_namespace()

        redis.scan_iter.assert_called_once_with(match="backoffice:settings:*")
        redis.delete.assert_awaited_once_with("backoffice:settings:a", "backoffice:settings:b")

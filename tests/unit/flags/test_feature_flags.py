"""Tests for feature flag models and FeatureFlagClient."""

import errno
from pathlib import Path

import httpx
import pytest

from backoffice.config.models.flags import FeatureFlagsConfig
from backoffice.flags.client import FLAGS_KEY, TIMESTAMP_KEY, FeatureFlagClient
from backoffice.flags.models import DEFAULT_FLAGS, FeatureFlagSet
from backoffice.local_storage import InMemoryLocalStorage, JsonFileLocalStorage

DAY = 24 * 60 * 60


class FullDiskStorage(InMemoryLocalStorage):
    def set(self, key, value) -> None:
        raise OSError(errno.ENOSPC, "No space left on device")


class Clock:
    def __init__(self) -> None:
        self.now = 1_700_000_000.0

    def __call__(self) -> float:
        return self.now


class SettingsServer:
    """MockTransport handler serving a configurable /settings payload."""

    def __init__(self, payload: dict | None = None) -> None:
        self.payload = payload or {"featureFlags": {"betaFeatures": True}}
        self.calls = 0
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.fail:
            return httpx.Response(503)
        return httpx.Response(200, json=self.payload)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def server() -> SettingsServer:
    return SettingsServer()


@pytest.fixture
def storage() -> InMemoryLocalStorage:
    return InMemoryLocalStorage()


@pytest.fixture
async def client(server, storage, clock):
    client = FeatureFlagClient(
        base_url="http://test/v1",
        storage=storage,
        transport=httpx.MockTransport(server),
        clock=clock,
    )
    yield client
    await client.close()


class TestFeatureFlagSet:
    def test_defaults_are_off(self) -> None:
        assert DEFAULT_FLAGS.model_dump(by_alias=True) == {
            "betaFeatures": False,
            "newDashboard": False,
            "advancedReports": False,
            "enableRegistration": False,
            "enableGuestCheckout": False,
        }

    def test_nested_flags_win_over_legacy_keys(self) -> None:
        flags = FeatureFlagSet.from_settings(
            {
                "featureFlags": {"enableRegistration": False, "newDashboard": 1},
                "enableRegistration": True,
                "enableGuestCheckout": "yes",
            }
        )
        assert flags.enable_registration is False
        assert flags.enable_guest_checkout is True
        assert flags.new_dashboard is True

    def test_legacy_keys_only_cover_their_flags(self) -> None:
        flags = FeatureFlagSet.from_settings({"betaFeatures": True})
        assert flags.beta_features is False

    def test_is_enabled_by_either_name(self) -> None:
        flags = FeatureFlagSet(betaFeatures=True)
        assert flags.is_enabled("betaFeatures")
        assert flags.is_enabled("beta_features")
        assert not flags.is_enabled("unknownFlag")


class TestFetch:
    async def test_remote_fetch_is_stored(self, client, storage, clock) -> None:
        flags = await client.fetch()
        assert flags.beta_features is True
        assert storage.get(FLAGS_KEY)["betaFeatures"] is True
        assert storage.get(TIMESTAMP_KEY) == clock.now

    async def test_memory_cache_within_ttl(self, client, server, clock) -> None:
        await client.fetch()
        clock.now += 59
        await client.fetch()
        assert server.calls == 1

        clock.now += 2
        await client.fetch()
        assert server.calls == 2

    async def test_clear_cache_forces_refetch(self, client, server) -> None:
        await client.fetch()
        client.clear_cache()
        await client.fetch()
        assert server.calls == 2

    async def test_stale_copy_used_on_failure(self, client, server, clock) -> None:
        await client.fetch()
        server.fail = True
        clock.now += 12 * 60 * 60

        flags = await client.fetch()

        assert flags.beta_features is True

    async def test_stale_copy_expires(self, client, server, clock) -> None:
        await client.fetch()
        server.fail = True
        clock.now += DAY + 1

        flags = await client.fetch()

        assert flags == DEFAULT_FLAGS

    async def test_non_object_payload_falls_back(self, storage, clock) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=[1, 2]))
        async with FeatureFlagClient(
            base_url="http://test/v1", storage=storage, transport=transport, clock=clock
        ) as client:
            assert await client.fetch() == DEFAULT_FLAGS

    async def test_is_enabled(self, client) -> None:
        assert await client.is_enabled("betaFeatures") is True
        assert await client.is_enabled("newDashboard") is False

    async def test_storage_write_failure_still_returns_flags(self, server, clock) -> None:
        async with FeatureFlagClient(
            base_url="http://test/v1",
            storage=FullDiskStorage(),
            transport=httpx.MockTransport(server),
            clock=clock,
        ) as client:
            flags = await client.fetch()
            assert flags.beta_features is True
            assert await client.is_enabled("betaFeatures") is True


class TestJsonFileLocalStorage:
    def test_persists_between_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "flags.json"
        JsonFileLocalStorage(path).set(FLAGS_KEY, {"betaFeatures": True})
        assert JsonFileLocalStorage(path).get(FLAGS_KEY) == {"betaFeatures": True}

    def test_corrupt_file_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "flags.json"
        path.write_text("{not json")
        assert JsonFileLocalStorage(path).get(FLAGS_KEY) is None

    def test_remove(self, tmp_path: Path) -> None:
        storage = JsonFileLocalStorage(tmp_path / "flags.json")
        storage.set("a", 1)
        storage.remove("a")
        assert storage.get("a") is None

    async def test_client_from_config_uses_file(self, tmp_path: Path) -> None:
        path = tmp_path / "flags.json"
        config = FeatureFlagsConfig(base_url="http://test/v1", storage_path=str(path))
        transport = httpx.MockTransport(
            lambda r: httpx.Response(200, json={"featureFlags": {"advancedReports": True}})
        )

        async with FeatureFlagClient.from_config(config, transport=transport) as client:
            await client.fetch()

        assert JsonFileLocalStorage(path).get(FLAGS_KEY)["advancedReports"] is True

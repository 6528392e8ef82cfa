"""FeatureFlagClient: cached feature flag lookups against the settings API."""

import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from backoffice.config.models.flags import FeatureFlagsConfig
from backoffice.flags.models import DEFAULT_FLAGS, FeatureFlagSet
from backoffice.local_storage import InMemoryLocalStorage, JsonFileLocalStorage, LocalStorage
from backoffice.observability.logging import get_logger
from backoffice.observability.metrics import FEATURE_FLAG_FETCHES

logger = get_logger(__name__)

FLAGS_KEY = "featureFlags"
TIMESTAMP_KEY = "featureFlagsTimestamp"


class FeatureFlagClient:
    """Fetches flags from ``GET {base_url}/settings`` with two cache tiers.

    Fresh flags are served from memory for ``cache_ttl_seconds``. Every
    successful fetch is also written to local storage; when a fetch fails
    that copy is used if it is younger than ``stale_ttl_seconds``, otherwise
    every flag is off. ``fetch`` never raises.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/v1",
        storage: LocalStorage | None = None,
        *,
        token: str | None = None,
        cache_ttl_seconds: float = 60.0,
        stale_ttl_seconds: float = 24 * 60 * 60,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._storage = storage or InMemoryLocalStorage()
        self._token = token
        self._cache_ttl = cache_ttl_seconds
        self._stale_ttl = stale_ttl_seconds
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport,
        )
        self._cached: FeatureFlagSet | None = None
        self._cached_at = 0.0

    @classmethod
    def from_config(
        cls,
        config: FeatureFlagsConfig,
        *,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "FeatureFlagClient":
        storage: LocalStorage = (
            JsonFileLocalStorage(config.storage_path)
            if config.storage_path
            else InMemoryLocalStorage()
        )
        return cls(
            base_url=config.base_url,
            storage=storage,
            token=token,
            cache_ttl_seconds=config.cache_ttl_seconds,
            stale_ttl_seconds=config.stale_ttl_seconds,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "FeatureFlagClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch(self) -> FeatureFlagSet:
        now = self._clock()
        if self._cached is not None and (now - self._cached_at) < self._cache_ttl:
            FEATURE_FLAG_FETCHES.labels(source="memory").inc()
            return self._cached

        try:
            settings = await self._get_settings()
            flags = FeatureFlagSet.from_settings(settings)
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.warning("feature_flags_fetch_failed", error=str(e))
            return self._fallback(now)

        self._cached = flags
        self._cached_at = now
        try:
            self._storage.set(FLAGS_KEY, flags.model_dump(by_alias=True))
            self._storage.set(TIMESTAMP_KEY, now)
        except OSError as e:
            logger.warning("feature_flags_store_failed", error=str(e))
        FEATURE_FLAG_FETCHES.labels(source="remote").inc()
        return flags

    async def _get_settings(self) -> dict[str, Any]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        response = await self._client.get("/settings", headers=headers)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("settings response is not an object")
        return data

    def _fallback(self, now: float) -> FeatureFlagSet:
        stored = self._storage.get(FLAGS_KEY)
        stored_at = self._storage.get(TIMESTAMP_KEY)
        if stored is not None and isinstance(stored_at, int | float) and now - stored_at < self._stale_ttl:
            try:
                flags = FeatureFlagSet.model_validate(stored)
            except ValidationError as e:
                logger.warning("feature_flags_stale_copy_invalid", error=str(e))
            else:
                FEATURE_FLAG_FETCHES.labels(source="stale").inc()
                return flags

        FEATURE_FLAG_FETCHES.labels(source="default").inc()
        return DEFAULT_FLAGS

    async def is_enabled(self, name: str) -> bool:
        flags = await self.fetch()
        return flags.is_enabled(name)

    def clear_cache(self) -> None:
        """Forget the in-memory flags; the stored stale copy is kept."""
        self._cached = None
        self._cached_at = 0.0

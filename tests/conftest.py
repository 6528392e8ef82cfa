"""Shared test fixtures for the Backoffice test suite."""

import os
from collections.abc import AsyncIterator, Callable, Generator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
import structlog
from fastapi.testclient import TestClient
from jose import jwt

from backoffice.api.app import create_app
from backoffice.config.settings import Settings, set_toml_config
from backoffice.context import AppContext, build_inmemory_context

TEST_JWT_SECRET = "test-secret-for-unit-tests"


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    """Drop structlog configuration bound to a per-test (later closed) capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"BACKOFFICE_DEBUG": "true"}):
                ...
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from backoffice.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("BACKOFFICE_JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


@pytest.fixture
def make_token(jwt_secret: str) -> Callable[..., str]:
    """Factory for signed bearer tokens.

    Usage:
        headers = {"Authorization": f"Bearer {make_token(role='admin')}"}
    """

    def _make_token(
        sub: str = "user-1",
        role: str = "user",
        email: str | None = "user@example.com",
        **claims: Any,
    ) -> str:
        payload: dict[str, Any] = {"sub": sub, "role": role, **claims}
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, jwt_secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def admin_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub='admin-1', role='admin')}"}


@pytest.fixture
def user_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub='user-1', role='user')}"}


class FakePool:
    """Stand-in for PostgresPool that hands out a single mocked connection."""

    def __init__(self) -> None:
        self.conn = AsyncMock()
        self.acting_users: list[str | None] = []
        self.healthy = True

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncMock]:
        yield self.conn

    @asynccontextmanager
    async def transaction(self, acting_user_id: str | None = None) -> AsyncIterator[AsyncMock]:
        self.acting_users.append(acting_user_id)
        yield self.conn

    async def health_check(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def api_settings() -> Settings:
    """In-memory settings that ignore whatever TOML a previous test loaded."""
    set_toml_config({})
    return Settings(storage={"backend": "inmemory"})


@pytest.fixture
async def api_context(api_settings: Settings) -> AppContext:
    """In-memory context with tracking on the settings table and defaults seeded."""
    context = build_inmemory_context(api_settings)
    await context.record_gateway.enable_table_tracking("settings")
    await context.settings_service.seed_defaults()
    return context


@pytest.fixture
def client(api_context: AppContext, jwt_secret: str) -> Generator[TestClient, None, None]:
    app = create_app(context=api_context)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

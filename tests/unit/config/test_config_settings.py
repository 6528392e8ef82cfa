"""Unit tests for Settings and get_settings."""

from collections.abc import Generator
from pathlib import Path

import pytest

from backoffice.config import get_settings, reload_settings
from backoffice.config.settings import Settings, set_toml_config


@pytest.fixture(autouse=True)
def empty_toml() -> Generator[None, None, None]:
    set_toml_config({})
    yield
    set_toml_config({})


@pytest.fixture
def config_dir(
    test_config_dir: Path, mock_toml_files, monkeypatch: pytest.MonkeyPatch
) -> Path:
    mock_toml_files({
        "default.toml": (
            "app_name = 'test'\n"
            "[storage]\nbackend = 'inmemory'\ntracked_tables = ['settings', 'orders']\n"
        ),
    })
    monkeypatch.setenv("BACKOFFICE_CONFIG_DIR", str(test_config_dir))
    monkeypatch.setenv("BACKOFFICE_ENV", "nonexistent")
    return test_config_dir


class TestSettingsDefaults:
    def test_top_level(self) -> None:
        settings = Settings()
        assert settings.app_name == "backoffice"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_sections(self) -> None:
        settings = Settings()
        assert settings.api.port == 8000
        assert settings.api.auth.algorithm == "HS256"
        assert settings.storage.backend == "postgres"
        assert settings.storage.cache.ttl_seconds == 300
        assert settings.storage.tracked_tables == ["settings"]
        assert settings.audit.max_entries == 1000
        assert settings.feature_flags.cache_ttl_seconds == 60
        assert settings.feature_flags.stale_ttl_seconds == 86400
        assert settings.observability.tracing.enabled is False

    def test_cors_origins_from_string(self) -> None:
        settings = Settings(api={"cors_origins": "https://a.example, https://b.example"})
        assert settings.api.cors_origins == ["https://a.example", "https://b.example"]


class TestGetSettings:
    def test_reads_toml(self, config_dir: Path) -> None:
        settings = get_settings()
        assert settings.app_name == "test"
        assert settings.storage.backend == "inmemory"
        assert settings.storage.tracked_tables == ["settings", "orders"]

    def test_cached(self, config_dir: Path) -> None:
        assert get_settings() is get_settings()

    def test_reload(self, config_dir: Path) -> None:
        assert get_settings().app_name == "test"
        (config_dir / "default.toml").write_text("app_name = 'updated'")
        assert reload_settings().app_name == "updated"


class TestEnvironmentOverrides:
    def test_top_level_override(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKOFFICE_DEBUG", "true")
        assert get_settings().debug is True

    def test_nested_override(self, config_dir: Path, env_override) -> None:
        with env_override({"BACKOFFICE_STORAGE__CACHE__TTL_SECONDS": "30"}):
            assert get_settings().storage.cache.ttl_seconds == 30

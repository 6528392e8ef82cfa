"""Locate and merge the TOML files under ``config/``.

``default.toml`` is required. ``{BACKOFFICE_ENV}.toml`` is layered on top
when present, table by table; arrays and scalars in the environment file
replace the default outright (``tracked_tables = ["orders"]`` does not keep
``settings``).
"""

import os
import re
import tomllib
from pathlib import Path
from typing import Any

from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

CONFIG_DIR_ENV = "BACKOFFICE_CONFIG_DIR"
ENVIRONMENT_ENV = "BACKOFFICE_ENV"
DEFAULT_ENVIRONMENT = "development"

# Checkout root, where alembic.ini and config/ live next to the package
_REPO_ROOT = Path(__file__).resolve().parents[2]
_ENVIRONMENT_NAME = re.compile(r"[A-Za-z0-9_-]+")


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    ``BACKOFFICE_CONFIG_DIR`` wins and must exist. Otherwise the checkout's
    ``config/`` is used, falling back to ``./config`` for installed copies.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    bundled = _REPO_ROOT / "config"
    return bundled if bundled.is_dir() else Path.cwd() / "config"


def get_environment() -> str:
    """Name of the environment overlay, ``development`` unless set.

    Raises:
        ValueError: The name could escape the config directory.
    """
    name = os.environ.get(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT
    if not _ENVIRONMENT_NAME.fullmatch(name):
        raise ValueError(f"Invalid {ENVIRONMENT_ENV}: {name!r}")
    return name


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from None


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` layered on; tables merge, other values replace."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def config_files(config_dir: Path, environment: str) -> list[Path]:
    """The files ``load_config`` reads, in merge order."""
    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )
    files = [default_path]
    overlay = config_dir / f"{environment}.toml"
    if overlay.is_file():
        files.append(overlay)
    return files


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Merge ``default.toml`` with the environment overlay.

    Both arguments default to the environment-driven lookups above.
    """
    config_dir = config_dir or get_config_dir()
    environment = environment or get_environment()

    config: dict[str, Any] = {}
    files = config_files(config_dir, environment)
    for path in files:
        config = deep_merge(config, load_toml(path))

    logger.debug(
        "config_loaded",
        environment=environment,
        files=[path.name for path in files],
    )
    return config

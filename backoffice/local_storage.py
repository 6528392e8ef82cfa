"""Small persistent key/value stores for client-side state.

The HTTP clients keep their fallback copies here: the feature flag client
its last good flags, the audit client its last unsent entry.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from backoffice.observability.logging import get_logger

logger = get_logger(__name__)


class LocalStorage(ABC):
    """Abstract JSON-value key/value store."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class InMemoryLocalStorage(LocalStorage):
    """Process-local storage, lost on restart."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileLocalStorage(LocalStorage):
    """Storage persisted as a single JSON object on disk.

    A missing or unreadable file reads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("local_storage_read_failed", path=str(self._path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp.replace(self._path)

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

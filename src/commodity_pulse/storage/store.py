"""Key/value persistence for durable app state.

Holds three independent logical entries (quote snapshot, favorites,
filter). Values are JSON-compatible; the store never interprets them.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from commodity_pulse.core.config import StorageBackend, StorageConfig
from commodity_pulse.core.exceptions import StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistentStore(Protocol):
    """Protocol for key/value persistence backends."""

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under key, replacing any previous one."""
        ...

    def remove(self, key: str) -> None:
        """Delete key. Removing an absent key is not an error."""
        ...


class MemoryStore:
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Single-document JSON file store with write-through semantics.

    The file is read on first access. Every ``set``/``remove`` rewrites
    the whole document via a temp file and atomic rename.

    Parameters
    ----------
    path : str
        Path to the JSON file. Parent directories are created on first write.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._data: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        self._data = {}
        if not self._path.exists():
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store file %s: %s", self._path, e)
            return self._data

        if not isinstance(raw, dict):
            logger.warning(
                "Ignoring store file %s: expected an object, got %s",
                self._path,
                type(raw).__name__,
            )
            return self._data

        self._data = raw
        return self._data

    def _write(self, data: dict[str, Any], operation: str) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            payload = json.dumps(data, indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(
                f"Failed to write store file {self._path}: {e}",
                context={"operation": operation, "path": str(self._path)},
            ) from e

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = {**self._load(), key: value}
        self._write(data, "write")
        self._data = data

    def remove(self, key: str) -> None:
        current = self._load()
        if key not in current:
            return
        data = {k: v for k, v in current.items() if k != key}
        self._write(data, "remove")
        self._data = data


def create_store(config: StorageConfig) -> PersistentStore:
    """Create the store backend selected by config."""
    if config.backend == StorageBackend.MEMORY:
        return MemoryStore()
    return JsonFileStore(config.path)

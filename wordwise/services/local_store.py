"""
Local Store

Generic string key/value storage for one device: get, set, remove.
InMemoryLocalStore serves tests and throwaway sessions, JsonFileLocalStore
persists to a single JSON document on disk.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..exceptions import StorageError
from ..utils.game_logger import game_logger

__all__ = [
    "LocalStore", "InMemoryLocalStore", "JsonFileLocalStore", "create_local_store",
    "read_json", "write_json",
]


class LocalStore(ABC):
    """String key/value store. Implementations raise StorageError on I/O failure."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key; absent keys are ignored."""


class InMemoryLocalStore(LocalStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileLocalStore(LocalStore):
    """
    Persists every key in one JSON object file.

    The file is rewritten through a temporary file and an atomic rename, so
    a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str):
        self._path = Path(path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self._path} does not contain a JSON object")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(self._path.parent), suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)


def create_local_store(path: Optional[str]) -> LocalStore:
    """File-backed store when a path is configured, else in-memory."""
    if path:
        return JsonFileLocalStore(path)
    return InMemoryLocalStore()


def read_json(store: LocalStore, key: str, default: Any) -> Any:
    """
    Decode a JSON value from the store.

    Storage failures and corrupt values are logged and answered with the
    default, so callers continue with an in-memory value for the session.
    """
    try:
        raw = store.get(key)
    except StorageError as e:
        game_logger.log_error(None, e, f'load:{key}')
        return default
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        game_logger.log_error(None, e, f'decode:{key}')
        return default


def write_json(store: LocalStore, key: str, value: Any) -> bool:
    """Encode and store a JSON value. Returns False when the write failed."""
    try:
        if value is None:
            store.remove(key)
        else:
            store.set(key, json.dumps(value, ensure_ascii=False))
        return True
    except StorageError as e:
        game_logger.log_error(None, e, f'save:{key}')
        return False

"""
Key-Value Slots for Snapshot Persistence

The embedded backend keeps its whole database in memory and parks a
serialized copy under one key. These stores provide that key:

- FileKeyValueStore: a JSON object on disk (desktop/server runs)
- MemoryKeyValueStore: a dict (tests, throwaway sessions)
- BrowserLocalStorage: window.localStorage under Pyodide
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from gym_tracker.logger import get_logger


logger = get_logger(__name__)


class KeyValueStore(ABC):
    """String-to-string persistent slot, modelled on Web Storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Survives backend reopen, not process exit."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class FileKeyValueStore(KeyValueStore):
    """
    JSON-file-backed store.

    The whole file is rewritten on every set, via a temp file and
    os.replace so a crash mid-write keeps the previous contents.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(
                "keyvalue_store_unreadable",
                path=str(self.path),
                error=str(e),
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("keyvalue_store_not_an_object", path=str(self.path))
            return {}
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


class BrowserLocalStorage(KeyValueStore):
    """window.localStorage, reachable only when running under Pyodide."""

    def __init__(self):
        # Pyodide's JS bridge; not installable from PyPI
        from js import localStorage

        self._storage = localStorage

    def get_item(self, key: str) -> Optional[str]:
        return self._storage.getItem(key)

    def set_item(self, key: str, value: str) -> None:
        self._storage.setItem(key, value)

    def remove_item(self, key: str) -> None:
        self._storage.removeItem(key)

"""
Backend selection.

Runs once, when the service initializes. The choice is fixed for the
lifetime of the service object.
"""

import sys

from gym_tracker.config import StorageSettings
from gym_tracker.logger import get_logger
from gym_tracker.services.storage.embedded import EmbeddedSnapshotBackend
from gym_tracker.services.storage.interface import StorageBackend
from gym_tracker.services.storage.keyvalue import (
    BrowserLocalStorage,
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from gym_tracker.services.storage.native import NativeConnectionBackend


logger = get_logger(__name__)


def is_browser_runtime() -> bool:
    """True under Pyodide/Emscripten, where there is no durable file system."""
    return sys.platform == "emscripten"


def resolve_platform(settings: StorageSettings) -> str:
    """Map the configured platform to 'native' or 'embedded'."""
    if settings.platform != "auto":
        return settings.platform
    return "embedded" if is_browser_runtime() else "native"


def create_snapshot_store(settings: StorageSettings) -> KeyValueStore:
    if settings.snapshot_store == "browser":
        return BrowserLocalStorage()
    if settings.snapshot_store == "memory":
        return MemoryKeyValueStore()
    return FileKeyValueStore(settings.snapshot_store_path)


def create_backend(settings: StorageSettings) -> StorageBackend:
    """Build the backend for this environment. The backend is not opened."""
    platform = resolve_platform(settings)

    if platform == "embedded":
        store_settings = settings
        if settings.snapshot_store == "file" and is_browser_runtime():
            store_settings = settings.model_copy(update={"snapshot_store": "browser"})
        backend: StorageBackend = EmbeddedSnapshotBackend(
            store=create_snapshot_store(store_settings),
            snapshot_key=settings.snapshot_key,
            encoding=settings.snapshot_encoding,
        )
    else:
        backend = NativeConnectionBackend(
            db_path=settings.native_db_path,
            open_retries=settings.open_retries,
        )

    logger.info(
        "storage_backend_selected",
        backend=backend.name,
        configured_platform=settings.platform,
    )
    return backend

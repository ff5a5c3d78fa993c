"""
Storage Services Package

Provides the abstract backend interface and its two sqlite3
implementations: an in-memory database persisted as a snapshot, and a
native database file.
"""

from gym_tracker.services.storage.interface import (
    BackendUnavailableError,
    ConnectionError,
    RunResult,
    SchemaError,
    StorageBackend,
    StorageError,
    UninitializedStorageError,
)
from gym_tracker.services.storage.keyvalue import (
    BrowserLocalStorage,
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from gym_tracker.services.storage.embedded import (
    EmbeddedSnapshotBackend,
    decode_snapshot,
    encode_snapshot,
)
from gym_tracker.services.storage.native import NativeConnectionBackend
from gym_tracker.services.storage.factory import (
    create_backend,
    is_browser_runtime,
    resolve_platform,
)
from gym_tracker.services.storage.state import InitState, StorageState

__all__ = [
    # Interfaces
    "KeyValueStore",
    "RunResult",
    "StorageBackend",
    # Exceptions
    "BackendUnavailableError",
    "ConnectionError",
    "SchemaError",
    "StorageError",
    "UninitializedStorageError",
    # Implementations
    "BrowserLocalStorage",
    "EmbeddedSnapshotBackend",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "NativeConnectionBackend",
    "decode_snapshot",
    "encode_snapshot",
    # Selection and lifecycle
    "InitState",
    "StorageState",
    "create_backend",
    "is_browser_runtime",
    "resolve_platform",
]

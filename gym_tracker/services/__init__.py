"""Services package."""

from gym_tracker.services.storage import (
    BackendUnavailableError,
    ConnectionError,
    EmbeddedSnapshotBackend,
    InitState,
    NativeConnectionBackend,
    SchemaError,
    StorageBackend,
    StorageError,
    StorageState,
    UninitializedStorageError,
    create_backend,
)

__all__ = [
    "BackendUnavailableError",
    "ConnectionError",
    "EmbeddedSnapshotBackend",
    "InitState",
    "NativeConnectionBackend",
    "SchemaError",
    "StorageBackend",
    "StorageError",
    "StorageState",
    "UninitializedStorageError",
    "create_backend",
]

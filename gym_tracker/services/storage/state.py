"""
Shared storage state.

The service owns exactly one StorageState. Repositories and the report
aggregator receive it instead of the backend itself, so they always see
the current lifecycle and never keep a backend alive past close().
"""

from enum import Enum
from typing import Optional

from gym_tracker.services.storage.interface import (
    BackendUnavailableError,
    StorageBackend,
    UninitializedStorageError,
)


class InitState(str, Enum):
    """Initialization lifecycle of the storage layer."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class StorageState:
    """Holder for the selected backend and its lifecycle."""

    def __init__(self):
        self.backend: Optional[StorageBackend] = None
        self.state = InitState.UNINITIALIZED

    @property
    def is_ready(self) -> bool:
        return self.state == InitState.READY

    def require_backend(self) -> StorageBackend:
        """
        Backend for a write path.

        Raises:
            UninitializedStorageError: Initialization has not completed
            BackendUnavailableError: Ready, but the handle is gone
        """
        if not self.is_ready:
            raise UninitializedStorageError()
        if self.backend is None or not self.backend.is_open:
            raise BackendUnavailableError("Storage backend is not available")
        return self.backend

    def available_backend(self) -> Optional[StorageBackend]:
        """Backend for a read path, or None when reads should degrade."""
        if not self.is_ready or self.backend is None or not self.backend.is_open:
            return None
        return self.backend

"""
Abstract Storage Interface

DESIGN DECISION: Both SQL engines sit behind one small interface.
This allows us to:
1. Pick the backend once at startup and inject it everywhere else
2. Keep platform branches out of the repositories
3. Run the same repository tests against either engine

The interface is intentionally small - statements go in, rows come out.
Repositories own the SQL; backends own connections and persistence.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence


Params = Sequence[Any]
Row = dict[str, Any]


@dataclass(frozen=True)
class RunResult:
    """Outcome of a mutating statement."""
    last_insert_id: int
    rows_changed: int


def normalize_row(row: Row) -> Row:
    """
    Coerce identity columns to int.

    Identity columns are `id` and any foreign key ending in `Id`
    (`customerId`). Engines may hand them back as floats or strings.
    """
    for column, value in row.items():
        if value is None:
            continue
        if column == "id" or column.endswith("Id"):
            row[column] = int(value)
    return row


class StorageBackend(ABC):
    """
    Abstract interface for a SQL storage engine.

    Any backend (embedded snapshot, native file, ...) must implement
    these methods. Rows are returned as ordered column→value dicts.
    """

    name: str = "abstract"

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True once open() succeeded and until close()."""
        pass

    @abstractmethod
    async def open(self) -> None:
        """
        Acquire the engine.

        Raises:
            ConnectionError: If the engine cannot be opened
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the engine. Safe to call when not open."""
        pass

    @abstractmethod
    async def execute(self, statement: str) -> None:
        """
        Execute a parameterless statement (DDL or script).

        Raises:
            BackendUnavailableError: If the backend is not open
        """
        pass

    @abstractmethod
    async def run(self, statement: str, params: Params = ()) -> RunResult:
        """
        Execute one mutating statement.

        Returns:
            The last inserted row id and the number of rows changed
        """
        pass

    @abstractmethod
    async def run_batch(
        self,
        statements: Sequence[tuple[str, Params]],
    ) -> list[RunResult]:
        """
        Execute several mutating statements in one transaction.

        Either every statement takes effect or none does.
        """
        pass

    @abstractmethod
    async def query(self, statement: str, params: Params = ()) -> list[Row]:
        """
        Execute a SELECT.

        Returns:
            Rows in engine order, identity columns as int
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class UninitializedStorageError(StorageError):
    """Storage used before initialization completed."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Database not initialized")


class BackendUnavailableError(StorageError):
    """The backend handle is missing or closed."""
    pass


class SchemaError(StorageError):
    """Tables could not be created."""
    pass


class ConnectionError(StorageError):
    """Could not open the storage backend."""
    pass

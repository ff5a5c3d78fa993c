"""
Shared sqlite3 plumbing for both backends.

The embedded and native variants differ only in where the database
lives and how it survives a restart. Statement execution, row shaping
and batch transactions are identical and live here; subclasses supply
open() and, when they need one, a post-write hook.
"""

import sqlite3
from typing import Optional, Sequence

from gym_tracker.logger import get_logger
from gym_tracker.services.storage.interface import (
    BackendUnavailableError,
    Params,
    Row,
    RunResult,
    StorageBackend,
    normalize_row,
)


logger = get_logger(__name__)


class SQLiteBackend(StorageBackend):
    """
    sqlite3 connection in autocommit mode.

    isolation_level=None means every statement commits on its own;
    run_batch opens an explicit transaction around its statements.
    """

    def __init__(self):
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise BackendUnavailableError(f"{self.name} database is not open")
        return self._conn

    def _prepare(self, conn: sqlite3.Connection) -> sqlite3.Connection:
        conn.row_factory = sqlite3.Row
        return conn

    def _after_write(self) -> None:
        """Hook run after every successful mutating call."""
        pass

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("backend_closed", backend=self.name)

    async def execute(self, statement: str) -> None:
        conn = self._connection()
        conn.execute(statement)
        self._after_write()

    async def run(self, statement: str, params: Params = ()) -> RunResult:
        conn = self._connection()
        cursor = conn.execute(statement, tuple(params))
        result = RunResult(
            last_insert_id=int(cursor.lastrowid or 0),
            rows_changed=max(cursor.rowcount, 0),
        )
        self._after_write()
        return result

    async def run_batch(
        self,
        statements: Sequence[tuple[str, Params]],
    ) -> list[RunResult]:
        conn = self._connection()
        results = []
        conn.execute("BEGIN")
        try:
            for statement, params in statements:
                cursor = conn.execute(statement, tuple(params))
                results.append(
                    RunResult(
                        last_insert_id=int(cursor.lastrowid or 0),
                        rows_changed=max(cursor.rowcount, 0),
                    )
                )
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
        self._after_write()
        return results

    async def query(self, statement: str, params: Params = ()) -> list[Row]:
        conn = self._connection()
        cursor = conn.execute(statement, tuple(params))
        return [normalize_row(dict(row)) for row in cursor.fetchall()]

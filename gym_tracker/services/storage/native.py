"""
Native Connection Backend

A named, unencrypted, single-connection sqlite3 session on a database
file. The connection runs in autocommit mode, so each statement is
durable when it returns and no snapshot step is needed.

Only one session per database file may be open in the process; a
second open() on the same file is refused instead of silently sharing
the connection. A backend dropped without close() releases its file
when it is garbage collected.
"""

import sqlite3
import weakref
from pathlib import Path
from typing import ClassVar, Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gym_tracker.logger import get_logger
from gym_tracker.services.storage.interface import ConnectionError
from gym_tracker.services.storage.sqlite_base import SQLiteBackend


logger = get_logger(__name__)


def _release_session(
    sessions: set[str],
    session_key: str,
    conn: sqlite3.Connection,
) -> None:
    sessions.discard(session_key)
    conn.close()


class NativeConnectionBackend(SQLiteBackend):
    """sqlite3 database file on the device."""

    name = "native"

    _open_sessions: ClassVar[set[str]] = set()

    def __init__(self, db_path: Path, open_retries: int = 3):
        super().__init__()
        self.db_path = Path(db_path)
        self._open_retries = open_retries
        self._release: Optional[weakref.finalize] = None

    @property
    def _session_key(self) -> str:
        return str(self.db_path.resolve())

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None)
        try:
            # Touch the file so a locked or unreadable database fails here
            conn.execute("PRAGMA user_version").fetchone()
        except sqlite3.Error:
            conn.close()
            raise
        return self._prepare(conn)

    async def open(self) -> None:
        if self._conn is not None:
            return

        session_key = self._session_key
        if session_key in self._open_sessions:
            raise ConnectionError(
                f"A connection to {self.db_path} is already open"
            )

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._open_retries),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(sqlite3.OperationalError),
                reraise=True,
            ):
                with attempt:
                    conn = self._connect()
        except (OSError, sqlite3.Error) as e:
            raise ConnectionError(
                f"Failed to open database {self.db_path}: {e}"
            ) from e

        self._conn = conn
        self._open_sessions.add(session_key)
        # Frees the file for a new session if this backend is dropped unclosed
        self._release = weakref.finalize(
            self, _release_session, self._open_sessions, session_key, conn
        )
        logger.info("native_database_opened", path=str(self.db_path))

    async def close(self) -> None:
        if self._release is not None:
            self._release()
            self._release = None
        await super().close()

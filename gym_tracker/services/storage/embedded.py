"""
Embedded Snapshot Backend

DESIGN DECISION: The browser build has no durable database file, so the
whole database lives in memory and a serialized copy is parked in a
key-value slot (localStorage in the browser) after every write.

TRADEOFFS:
- Every write re-serializes the entire database (fine at gym scale)
- The snapshot save is not atomic with the write before it; if the save
  fails, memory is ahead of the slot until the next successful save
- A corrupt snapshot is discarded and the app starts with an empty
  database rather than refusing to start
"""

import base64
import binascii
import json
import sqlite3
from typing import Literal, Optional

from gym_tracker.logger import get_logger
from gym_tracker.services.storage.keyvalue import KeyValueStore
from gym_tracker.services.storage.sqlite_base import SQLiteBackend


logger = get_logger(__name__)

SnapshotEncoding = Literal["base64", "json-array"]


def encode_snapshot(data: bytes, encoding: SnapshotEncoding = "base64") -> str:
    """Encode database bytes for a string slot."""
    if encoding == "json-array":
        return json.dumps(list(data))
    return base64.b64encode(data).decode("ascii")


def decode_snapshot(text: str) -> bytes:
    """
    Decode a stored snapshot.

    Accepts either a JSON array of byte values or base64 text.

    Raises:
        ValueError: If the text is neither
    """
    stripped = text.strip()
    if stripped.startswith("["):
        values = json.loads(stripped)
        if not isinstance(values, list):
            raise ValueError("Snapshot JSON is not an array")
        return bytes(values)
    try:
        return base64.b64decode(stripped, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Snapshot is not valid base64: {e}") from e


class EmbeddedSnapshotBackend(SQLiteBackend):
    """
    In-memory sqlite3 database persisted as a snapshot under one key.
    """

    name = "embedded"

    def __init__(
        self,
        store: KeyValueStore,
        snapshot_key: str = "gym-tracker-db",
        encoding: SnapshotEncoding = "base64",
    ):
        super().__init__()
        self._store = store
        self._snapshot_key = snapshot_key
        self._encoding = encoding

    @property
    def snapshot_key(self) -> str:
        return self._snapshot_key

    def _load_snapshot(self) -> Optional[bytes]:
        saved = self._store.get_item(self._snapshot_key)
        if not saved:
            return None
        try:
            return decode_snapshot(saved)
        except (ValueError, TypeError) as e:
            logger.warning(
                "snapshot_unreadable_starting_fresh",
                key=self._snapshot_key,
                error=str(e),
            )
            return None

    def _restore(self, data: bytes) -> Optional[sqlite3.Connection]:
        conn = self._prepare(sqlite3.connect(":memory:", isolation_level=None))
        try:
            conn.deserialize(data)
            # A bad image often deserializes fine and fails on first read
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except sqlite3.DatabaseError as e:
            conn.close()
            logger.warning(
                "snapshot_corrupt_starting_fresh",
                key=self._snapshot_key,
                error=str(e),
            )
            return None
        return conn

    async def open(self) -> None:
        if self._conn is not None:
            return

        conn = None
        data = self._load_snapshot()
        if data:
            conn = self._restore(data)
            if conn is not None:
                logger.info(
                    "snapshot_loaded",
                    key=self._snapshot_key,
                    size_bytes=len(data),
                )

        if conn is None:
            conn = self._prepare(sqlite3.connect(":memory:", isolation_level=None))
            logger.info("embedded_database_created", key=self._snapshot_key)

        self._conn = conn

    def save_snapshot(self) -> bool:
        """
        Write the current database to the key-value slot.

        Returns True on success. Failures are logged, never raised.
        """
        if self._conn is None:
            return False
        try:
            data = self._conn.serialize()
            self._store.set_item(
                self._snapshot_key, encode_snapshot(data, self._encoding)
            )
        except Exception as e:
            logger.error(
                "snapshot_save_failed",
                key=self._snapshot_key,
                error=str(e),
            )
            return False
        return True

    def _after_write(self) -> None:
        self.save_snapshot()

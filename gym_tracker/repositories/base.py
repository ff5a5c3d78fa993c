"""
Base Repository

Row↔record conversion and the shared error policy:

- Writes need a ready backend. Before initialization they raise
  UninitializedStorageError; SQL failures are logged and re-raised as
  StorageError so callers know the write did not happen.
- Collection reads never raise. Without a ready backend, or when the
  SQL fails, they log and return an empty list so screens can always
  render.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError

from gym_tracker.logger import get_logger
from gym_tracker.models import StoredRecord
from gym_tracker.services.storage.interface import Row, StorageError
from gym_tracker.services.storage.state import StorageState


logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=StoredRecord)


CURRENCY_SCALE = Decimal("0.01")


def decimal_or_zero(value: Any) -> Decimal:
    """
    SUM() results: None for no rows, float or int otherwise.

    The engine sums REAL columns in binary floating point, so totals
    are rounded to the currency scale: 0.1 + 0.2 gives 0.30.
    """
    if value is None:
        return Decimal("0").quantize(CURRENCY_SCALE)
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP)


class BaseRepository(Generic[RecordT]):
    """CRUD for one table mapped to one record model."""

    table: str
    model: type[RecordT]
    order_by: str
    entity: str

    def __init__(self, storage: StorageState):
        self._storage = storage

    def _to_records(self, rows: list[Row]) -> list[RecordT]:
        records = []
        for row in rows:
            try:
                records.append(self.model.model_validate(row))
            except ValidationError as e:
                # Skip malformed rows rather than failing the whole list
                logger.warning(
                    f"{self.entity}_row_skipped",
                    row_id=row.get("id"),
                    error=str(e),
                )
        return records

    def _coerce(self, record: Union[RecordT, Mapping[str, Any]]) -> RecordT:
        if isinstance(record, self.model):
            return record
        return self.model.model_validate(record)

    async def add(self, record: Union[RecordT, Mapping[str, Any]]) -> int:
        """
        Insert a record and return its new id.

        Any id already on the record is ignored.

        Raises:
            UninitializedStorageError: Storage not initialized
            StorageError: If the insert fails
        """
        backend = self._storage.require_backend()
        row = self._coerce(record).to_row()

        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        statement = f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})"

        try:
            result = await backend.run(statement, list(row.values()))
        except Exception as e:
            logger.error(f"{self.entity}_add_failed", error=str(e))
            raise StorageError(f"Failed to add {self.entity}: {e}") from e

        logger.info(f"{self.entity}_added", id=result.last_insert_id)
        return result.last_insert_id

    async def get_all(self) -> list[RecordT]:
        """All records in display order. Empty when storage is unavailable."""
        backend = self._storage.available_backend()
        if backend is None:
            logger.warning(f"{self.entity}_list_storage_unavailable")
            return []

        try:
            rows = await backend.query(
                f"SELECT * FROM {self.table} ORDER BY {self.order_by}"
            )
        except Exception as e:
            logger.error(f"{self.entity}_list_failed", error=str(e))
            return []

        return self._to_records(rows)

    async def update(self, record_id: int, fields: Mapping[str, Any]) -> bool:
        """
        Rewrite exactly the supplied fields of one record.

        Field names may be attribute names (monthly_fee) or column names
        (monthlyFee). An `id` entry is ignored. The stored row merged with
        the changes must still be a valid record, and the validated
        values (normalized month names, Decimal amounts) are what gets
        written.

        Returns:
            True if a row was changed, False if there is no such record

        Raises:
            UninitializedStorageError: Storage not initialized
            ValueError: If a field name is unknown or a value is invalid
            StorageError: If the update fails
        """
        backend = self._storage.require_backend()

        changes: dict[str, Any] = {}
        for name, value in fields.items():
            column = self.model.column_for(name)
            if column == "id":
                continue
            changes[column] = value

        if not changes:
            logger.warning(f"{self.entity}_update_empty", id=record_id)
            return False

        try:
            rows = await backend.query(
                f"SELECT * FROM {self.table} WHERE id = ?", [record_id]
            )
        except Exception as e:
            logger.error(
                f"{self.entity}_update_failed", id=record_id, error=str(e)
            )
            raise StorageError(f"Failed to update {self.entity}: {e}") from e

        if not rows:
            logger.warning(f"{self.entity}_update_missing", id=record_id)
            return False

        try:
            merged = self.model.model_validate({**rows[0], **changes})
        except ValidationError as e:
            logger.warning(
                f"{self.entity}_update_invalid",
                id=record_id,
                fields=sorted(changes),
                error=str(e),
            )
            raise

        validated = merged.to_row()
        assignments = {column: validated[column] for column in changes}

        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        statement = f"UPDATE {self.table} SET {set_clause} WHERE id = ?"

        try:
            result = await backend.run(
                statement, [*assignments.values(), record_id]
            )
        except Exception as e:
            logger.error(
                f"{self.entity}_update_failed", id=record_id, error=str(e)
            )
            raise StorageError(f"Failed to update {self.entity}: {e}") from e

        logger.info(
            f"{self.entity}_updated",
            id=record_id,
            fields=sorted(assignments),
        )
        return result.rows_changed > 0

    async def _get_by_id(self, record_id: int) -> Optional[RecordT]:
        backend = self._storage.require_backend()
        try:
            rows = await backend.query(
                f"SELECT * FROM {self.table} WHERE id = ?", [record_id]
            )
        except Exception as e:
            logger.error(f"{self.entity}_get_failed", id=record_id, error=str(e))
            return None

        records = self._to_records(rows)
        return records[0] if records else None

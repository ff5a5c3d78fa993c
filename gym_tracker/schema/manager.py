"""
Schema Manager

Creates the three tables if they are missing and applies additive
column migrations. Running it against an up-to-date database is a
no-op, so it runs on every startup.

Column migrations are best effort: "duplicate column name" means the
column is already there and is ignored; any other failure is logged
and skipped so schema drift never blocks startup. Table creation
failures do propagate.
"""

from gym_tracker.logger import get_logger
from gym_tracker.services.storage.interface import SchemaError, StorageBackend


logger = get_logger(__name__)


TABLES = {
    "customers": """
        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT NOT NULL,
            email TEXT,
            joinDate TEXT NOT NULL,
            monthlyFee REAL NOT NULL,
            bloodGroup TEXT,
            image TEXT,
            isActive BOOLEAN DEFAULT 1
        )
    """,
    "payments": """
        CREATE TABLE IF NOT EXISTS payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            customerId INTEGER NOT NULL,
            amount REAL NOT NULL,
            paymentDate TEXT NOT NULL,
            month TEXT NOT NULL,
            year INTEGER NOT NULL,
            FOREIGN KEY (customerId) REFERENCES customers (id)
        )
    """,
    "expenses": """
        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            description TEXT NOT NULL,
            amount REAL NOT NULL,
            category TEXT NOT NULL,
            expenseDate TEXT NOT NULL,
            month TEXT NOT NULL,
            year INTEGER NOT NULL
        )
    """,
}

INDEXES = [
    ("idx_payments_customer", "payments", "customerId"),
    ("idx_payments_period", "payments", "year, month"),
    ("idx_expenses_period", "expenses", "year, month"),
]

# (table, column, type) added after the first release
COLUMN_MIGRATIONS = [
    ("customers", "bloodGroup", "TEXT"),
]

DUPLICATE_COLUMN_MARKER = "duplicate column name"


class SchemaManager:
    """Idempotent DDL for the gym tracker tables."""

    def __init__(self, backend: StorageBackend):
        self._backend = backend

    async def apply(self) -> None:
        """
        Bring the schema up to date.

        Raises:
            SchemaError: If a table or index cannot be created
        """
        await self._create_tables()
        for table, column, column_type in COLUMN_MIGRATIONS:
            await self._add_column(table, column, column_type)
        logger.info("schema_ready", backend=self._backend.name)

    async def _create_tables(self) -> None:
        try:
            for table, ddl in TABLES.items():
                await self._backend.execute(ddl)
                logger.debug("table_ensured", table=table)

            for index_name, table, columns in INDEXES:
                await self._backend.execute(
                    f"CREATE INDEX IF NOT EXISTS {index_name} ON {table}({columns})"
                )
        except Exception as e:
            logger.error("schema_create_failed", error=str(e))
            raise SchemaError(f"Failed to create tables: {e}") from e

    async def _add_column(self, table: str, column: str, column_type: str) -> bool:
        """Returns True if the column was added by this call."""
        try:
            await self._backend.execute(
                f"ALTER TABLE {table} ADD COLUMN {column} {column_type}"
            )
        except Exception as e:
            if DUPLICATE_COLUMN_MARKER in str(e).lower():
                logger.debug("column_already_exists", table=table, column=column)
            else:
                logger.error(
                    "column_migration_failed",
                    table=table,
                    column=column,
                    error=str(e),
                )
            return False

        logger.info("column_added", table=table, column=column)
        return True

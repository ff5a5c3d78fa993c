"""Schema creation and migration."""

from gym_tracker.schema.manager import (
    COLUMN_MIGRATIONS,
    TABLES,
    SchemaManager,
)

__all__ = ["COLUMN_MIGRATIONS", "TABLES", "SchemaManager"]

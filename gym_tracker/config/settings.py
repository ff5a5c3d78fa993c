"""
Configuration Management for Gym Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Callers never pass raw paths or flags around; they hand a Settings
object to the service and every storage decision is made from it.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage backend selection and persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GYM_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    platform: Literal["auto", "native", "embedded"] = Field(
        default="auto",
        description=(
            "Which backend to use. 'auto' picks the embedded snapshot "
            "backend inside a browser runtime and the native file otherwise"
        )
    )
    database_name: str = Field(
        default="gym-tracker",
        min_length=1,
        description="Logical database name (native file is <name>SQLite.db)"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the native database file and snapshot store"
    )

    # Embedded (snapshot) backend
    snapshot_key: str = Field(
        default="gym-tracker-db",
        min_length=1,
        description="Key under which the database snapshot is stored"
    )
    snapshot_store: Literal["file", "memory", "browser"] = Field(
        default="file",
        description="Key-value slot used for snapshots"
    )
    snapshot_encoding: Literal["base64", "json-array"] = Field(
        default="base64",
        description="Encoding used when writing snapshots (both are readable)"
    )

    # Native backend
    open_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts to open a locked native database file"
    )

    @field_validator("database_name")
    @classmethod
    def validate_database_name(cls, v: str) -> str:
        """Database name becomes a file name, so no path separators."""
        if "/" in v or "\\" in v:
            raise ValueError("database_name must not contain path separators")
        return v.strip()

    @property
    def native_db_path(self) -> Path:
        """Path of the on-device database file."""
        return self.data_dir / f"{self.database_name}SQLite.db"

    @property
    def snapshot_store_path(self) -> Path:
        """Path of the JSON file backing the file key-value store."""
        return self.data_dir / "local_storage.json"


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GYM_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Sections can be passed
    in directly, e.g. Settings(storage=StorageSettings(platform="embedded")).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for sections that failed to load.
    """
    results = {}

    try:
        StorageSettings()
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        LoggingSettings()
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)

    return results

"""
Configuration Management for Spendful

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Process-level configuration is centralized here.
The user's own preferences (reminder time, free history window, default
currency) are NOT configuration - they live in the AppSettings record in
the key-value store. Values here only seed those defaults and wire up the
storage and logging layers.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPENDFUL_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per storage key"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a file write before giving up"
    )
    write_backoff_max_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=30.0,
        description="Upper bound for the exponential backoff between write attempts"
    )


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPENDFUL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False renders for the console)"
    )

    # Seeds for the AppSettings record
    default_free_history_days: int = Field(
        default=30,
        ge=0,
        le=3650,
        description="Free history window for new installs"
    )
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Default currency code for new installs"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    return results

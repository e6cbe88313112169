"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so the external dependencies
(remote worksheet, local cache directory) are visible in one place.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Remote store (Google Sheets) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the worksheet holding transaction rows"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times to try opening the spreadsheet"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (the app still runs offline)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "The tracker will start in offline mode."
            )
        return v


class LocalCacheSettings(BaseSettings):
    """Local offline cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    directory: str = Field(
        default="./data",
        description="Directory holding the local key-value files"
    )
    storage_key: str = Field(
        default="finance-app-transactions",
        min_length=1,
        description="Key under which the whole transaction list is cached"
    )

    @property
    def directory_path(self) -> Path:
        return Path(self.directory).expanduser().resolve()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    recurring_months: int = Field(
        default=12,
        ge=1,
        le=12,
        description="Number of monthly instances created for a recurring entry"
    )


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

    # Loaded lazily so the tracker can run with only part of the config

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def cache(self) -> LocalCacheSettings:
        return LocalCacheSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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
    {setting_name}_error entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "cache", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

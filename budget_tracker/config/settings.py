"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every default matches the behaviour of the original browser widget
(storage key, currency marker, export file name), so an empty environment
gives the same ledger users already know.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger storage and display configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_backend: Literal["file", "sheets", "memory"] = Field(
        default="file",
        description="Where the serialized ledger is kept"
    )
    storage_key: str = Field(
        default="budget_transactions_v1",
        min_length=1,
        description="Key the serialized ledger is stored under"
    )
    data_path: Path = Field(
        default=Path("budget_data.json"),
        description="Key-value file used by the 'file' backend"
    )
    currency_symbol: str = Field(
        default="R",
        description="Currency marker placed before formatted amounts"
    )


class ExportSettings(BaseSettings):
    """Spreadsheet export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    filename: str = Field(
        default="BudgetTracker.xlsx",
        description="File name of the exported workbook"
    )
    sheet_name: str = Field(
        default="Transactions",
        max_length=31,
        description="Worksheet title (Excel caps titles at 31 characters)"
    )
    description_width: int = Field(
        default=40,
        ge=1,
        le=255,
        description="Width of the Description column"
    )
    amount_width: int = Field(
        default=15,
        ge=1,
        le=255,
        description="Width of the Amount column"
    )

    @field_validator('filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Export file name must be a bare .xlsx file name."""
        if Path(v).name != v:
            raise ValueError(f"Export filename must not contain directories: {v}")
        if not v.lower().endswith(".xlsx"):
            raise ValueError(f"Export filename must end with .xlsx: {v}")
        return v


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

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
    storage_sheet_name: str = Field(
        default="Storage",
        description="Name of the key/value worksheet"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    debug_mode: bool = Field(
        default=False,
        description="Log everything, overriding log_level"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum level written to the structured log"
    )

    @property
    def effective_log_level(self) -> str:
        """DEBUG in debug mode, otherwise log_level."""
        if self.debug_mode:
            return "DEBUG"
        return self.log_level


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

    # Loaded lazily so a missing Google Sheets setup doesn't block the
    # local backends.

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every group that failed to load.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "export", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

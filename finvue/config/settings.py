"""
Configuration Management for FinVue Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger document storage and bootstrap configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        extra="ignore"
    )

    data_dir: str = Field(
        default=".finvue",
        description="Directory holding the persisted ledger document"
    )
    storage_key: str = Field(
        default="finvue_data_v2",
        description="Fixed key the ledger document is stored under"
    )

    # Bootstrap admin, created only when no document exists yet
    bootstrap_admin_id: str = Field(
        default="admin_1",
        description="ID of the initial ADMIN user"
    )
    bootstrap_admin_username: str = Field(
        default="admin",
        description="Username of the initial ADMIN user"
    )
    bootstrap_admin_password: str = Field(
        default="admin",
        description="Credential of the initial ADMIN user"
    )
    default_company_name: str = Field(
        default="FinVue Enterprise",
        description="Organization display name on first start"
    )

    @property
    def document_path(self) -> Path:
        """Path of the JSON document for the configured storage key."""
        return Path(self.data_dir) / f"{self.storage_key}.json"


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for advisory tips."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )
    max_tips: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many tips to ask for"
    )


class SyncSettings(BaseSettings):
    """Remote sync transport configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        extra="ignore"
    )

    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="HTTP timeout for webhook pushes"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts before a push is reported as failed"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets sync target configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )

    # Sheet names within the spreadsheet
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet for the user directory"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before syncing to a spreadsheet."
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Logo / avatar upload limits
    max_upload_size_mb: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Maximum upload file size in MB"
    )
    supported_image_formats: str = Field(
        default="png,jpeg",
        description="Comma-separated list of supported image formats"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()

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

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    `<name>_error` entries for the ones that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "gemini", "sync", "google_sheets", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

"""Configuration package."""

from finvue.config.settings import (
    AppSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    LedgerSettings,
    Settings,
    SyncSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "LedgerSettings",
    "Settings",
    "SyncSettings",
    "get_settings",
    "validate_all_settings",
]

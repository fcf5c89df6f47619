"""
Remote Sync Package

Two transports behind one interface, chosen by the configured URL:
a spreadsheet URL is written through the Sheets API, anything else
is treated as a webhook endpoint.
"""

from typing import Optional

from finvue.services.sync.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsSyncError,
    GoogleSheetsSyncService,
)
from finvue.services.sync.interface import RemoteSyncInterface, build_sync_payload
from finvue.services.sync.webhook import WebhookSyncService


SPREADSHEET_URL_MARKER = "docs.google.com/spreadsheets/"


def is_spreadsheet_url(url: str) -> bool:
    return SPREADSHEET_URL_MARKER in url


def sync_service_for(
    url: str,
    webhook: Optional[WebhookSyncService] = None,
    sheets: Optional[GoogleSheetsSyncService] = None,
) -> RemoteSyncInterface:
    """Pick the transport for `url`, building it on first use."""
    if is_spreadsheet_url(url):
        return sheets or GoogleSheetsSyncService()
    return webhook or WebhookSyncService()


__all__ = [
    "GoogleSheetsClient",
    "GoogleSheetsSyncError",
    "GoogleSheetsSyncService",
    "RemoteSyncInterface",
    "WebhookSyncService",
    "build_sync_payload",
    "is_spreadsheet_url",
    "sync_service_for",
]

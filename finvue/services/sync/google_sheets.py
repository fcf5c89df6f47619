"""
Google Sheets Sync

Writes the snapshot straight into a spreadsheet the service account
has been shared on: one worksheet of transactions, one of users.
Each push replaces the worksheet contents, so the sheet always mirrors
the ledger rather than accumulating duplicates.

TRADEOFFS:
- Whole-sheet rewrite is fine at small-organization volume
- No read-back: the sheet is a report, never a source of truth
"""

import asyncio
from typing import Optional

import gspread
import requests
import structlog
from google.auth.exceptions import TransportError
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from finvue.config import GoogleSheetsSettings, get_settings
from finvue.models.ledger import AppState
from finvue.services.sync.interface import RemoteSyncInterface, build_sync_payload


logger = structlog.get_logger()


TRANSACTION_COLUMNS = [
    "id",
    "date",
    "type",
    "category",
    "subCategory",
    "amount",
    "source",
    "status",
    "note",
    "userId",
    "createdBy",
]

USER_COLUMNS = ["id", "username", "role"]


class GoogleSheetsSyncError(Exception):
    """Could not reach or write the spreadsheet."""
    pass


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        client: Optional[gspread.Client] = None,
    ):
        self._settings = settings
        self._client = client

    @property
    def settings(self) -> GoogleSheetsSettings:
        if self._settings is None:
            self._settings = get_settings().google_sheets
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self.settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise GoogleSheetsSyncError(
                    f"Google credentials file not found: {self.settings.credentials_path}"
                )
            except Exception as e:
                raise GoogleSheetsSyncError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self, url: str) -> gspread.Spreadsheet:
        try:
            return self.connect().open_by_url(url)
        except gspread.SpreadsheetNotFound:
            raise GoogleSheetsSyncError(f"Spreadsheet not found: {url}")
        except gspread.exceptions.NoValidUrlKeyFound:
            raise GoogleSheetsSyncError(f"Not a spreadsheet URL: {url}")

    @staticmethod
    def get_or_create_worksheet(
        spreadsheet: gspread.Spreadsheet,
        title: str,
        columns: list[str],
    ) -> gspread.Worksheet:
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            return spreadsheet.add_worksheet(title=title, rows=1000, cols=len(columns))


class GoogleSheetsSyncService(RemoteSyncInterface):

    name = "google_sheets_sync"

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _rows(records: list[dict], columns: list[str]) -> list[list]:
        return [columns] + [
            ["" if record.get(col) is None else record.get(col) for col in columns]
            for record in records
        ]

    def _write(self, url: str, payload: dict) -> None:
        spreadsheet = self._client.get_spreadsheet(url)
        sheets = (
            (self._client.settings.transactions_sheet_name, payload["transactions"], TRANSACTION_COLUMNS),
            (self._client.settings.users_sheet_name, payload["users"], USER_COLUMNS),
        )
        for title, records, columns in sheets:
            worksheet = self._client.get_or_create_worksheet(spreadsheet, title, columns)
            worksheet.clear()
            worksheet.update(values=self._rows(records, columns), range_name="A1")

    async def push(self, url: str, state: AppState) -> bool:
        payload = build_sync_payload(state)
        try:
            await asyncio.to_thread(self._write, url, payload)
        except (
            GoogleSheetsSyncError,
            gspread.exceptions.GSpreadException,
            # Raised by the HTTP session under gspread
            requests.RequestException,
            TransportError,
        ) as e:
            logger.error("google_sheets_sync_failed", url=url, error=str(e))
            return False

        logger.info(
            "google_sheets_sync_pushed",
            url=url,
            transactions=len(payload["transactions"]),
        )
        return True

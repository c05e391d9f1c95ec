"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- One row per key, the whole collection JSON-encoded in a single cell
- Not suitable for large histories (a cell holds at most 50k characters)
- No transactions (the in-process lock is all we have)

The implementation follows the abstract interface, so the business
logic does not know which backend it is talking to.
"""

import json
from datetime import datetime
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from lifeledger.config import GoogleSheetsSettings, get_settings
from lifeledger.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    NotFoundError,
    StorageError,
)


KEY_VALUE_COLUMNS = [
    "key",
    "value_json",
    "updated_at",
]

_sheets_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_not_exception_type((ConnectionError, NotFoundError)),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @_sheets_retry
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
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise NotFoundError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_key_value_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=100,
                cols=len(KEY_VALUE_COLUMNS),
            )
            sheet.append_row(KEY_VALUE_COLUMNS)
        return sheet


class GoogleSheetsStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value store.

    Each key is one row: [key, value_json, updated_at].
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        super().__init__()
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row index, row values) for a key, skipping the header."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == key:
                return idx, row
        return None, None

    @_sheets_retry
    def read(self, key: str) -> Optional[Any]:
        try:
            sheet = self._client.get_key_value_sheet()
            _, row = self._find_row(sheet, key)
        except (ConnectionError, NotFoundError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to read '{key}': {e}")

        if row is None or len(row) < 2 or not row[1]:
            return None
        try:
            return json.loads(row[1])
        except json.JSONDecodeError:
            # Treated like an unreadable browser store entry
            return None

    @_sheets_retry
    def write(self, key: str, value: Any) -> None:
        try:
            sheet = self._client.get_key_value_sheet()
            idx, _ = self._find_row(sheet, key)
            new_row = [key, json.dumps(value, ensure_ascii=False), datetime.utcnow().isoformat()]
            if idx is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{idx}:C{idx}",
                    values=[new_row],
                    value_input_option="RAW",
                )
        except (ConnectionError, NotFoundError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to write '{key}': {e}")

    @_sheets_retry
    def remove(self, key: str) -> None:
        try:
            sheet = self._client.get_key_value_sheet()
            idx, _ = self._find_row(sheet, key)
            if idx is not None:
                sheet.delete_rows(idx)
        except (ConnectionError, NotFoundError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove '{key}': {e}")

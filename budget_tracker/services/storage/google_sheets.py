"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a remote backend because:
1. The ledger survives losing the local machine
2. Users can look at the raw stored value directly in Sheets
3. No database setup required

The worksheet is a plain two-column key/value table:

    | key                    | value                         |
    | budget_transactions_v1 | [{"id": 1, "text": ...}, ...] |

TRADEOFFS:
- Google Sheets caps a cell at 50,000 characters; a ledger bigger than
  that cannot be saved here and the write is rejected
- Every get/set is a network round trip (fine for one interactive user)
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from budget_tracker.config import GoogleSheetsSettings, get_settings
from budget_tracker.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
)


STORAGE_COLUMNS = ["key", "value"]

# Google Sheets hard limit on characters in a single cell
MAX_CELL_CHARACTERS = 50000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_storage_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.storage_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.storage_sheet_name,
                rows=100,
                cols=len(STORAGE_COLUMNS),
            )
            sheet.append_row(STORAGE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStorage(KeyValueStorageInterface):
    """
    Google Sheets implementation of key-value storage.

    One row per key, the header row is skipped.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _find_row(all_rows: list[list[str]], key: str) -> Optional[int]:
        """1-based sheet row number holding the key, or None."""
        for idx, row in enumerate(all_rows[1:], start=2):  # Start from 2 (row 1 is header)
            if row and row[0] == key:
                return idx
        return None

    def get(self, key: str) -> Optional[str]:
        """Read the value stored under a key."""
        try:
            sheet = self._client.get_storage_sheet()
            all_rows = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key!r} from Google Sheets: {e}")

        idx = self._find_row(all_rows, key)
        if idx is None:
            return None

        row = all_rows[idx - 1]
        return row[1] if len(row) > 1 else ""

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under a key."""
        if len(value) > MAX_CELL_CHARACTERS:
            raise PersistenceWriteError(
                f"Value for {key!r} is {len(value)} characters; "
                f"Google Sheets cells hold at most {MAX_CELL_CHARACTERS}"
            )

        try:
            sheet = self._client.get_storage_sheet()
            idx = self._find_row(sheet.get_all_values(), key)

            if idx is None:
                sheet.append_row([key, value], value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"B{idx}",
                    values=[[value]],
                    value_input_option="RAW",
                )
        except Exception as e:
            raise PersistenceWriteError(f"Failed to write {key!r} to Google Sheets: {e}")

"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (batches are validated fully before anything is appended)
- No row-level security of its own (RowStore enforces ownership)

Each table lives in its own worksheet: row 1 is the header
(the column names from rows.py), every following row is one record.
"""

from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import GoogleSheetsSettings, get_settings
from expense_tracker.models.session import AuthSession
from expense_tracker.services.storage.backend import RowStore
from expense_tracker.services.storage.interface import ConnectionError
from expense_tracker.services.storage.rows import (
    BUDGETS_TABLE,
    EXPENSES_TABLE,
    TABLE_COLUMNS,
)


logger = structlog.get_logger(__name__)

# Header row + 1-based sheet rows
FIRST_DATA_ROW = 2


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
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
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def sheet_name(self, table: str) -> str:
        return {
            EXPENSES_TABLE: self._settings.expenses_sheet_name,
            BUDGETS_TABLE: self._settings.budgets_sheet_name,
        }[table]

    def get_worksheet(self, table: str) -> gspread.Worksheet:
        """Get or create the worksheet holding ``table``."""
        if table in self._worksheets:
            return self._worksheets[table]

        spreadsheet = self.get_spreadsheet()
        title = self.sheet_name(table)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(TABLE_COLUMNS[table]),
            )
            sheet.append_row(TABLE_COLUMNS[table])
            logger.info("worksheet_created", table=table, title=title)

        self._worksheets[table] = sheet
        return sheet


class GoogleSheetsRowStore(RowStore):
    """
    RowStore backed by Google Sheets worksheets.

    Cells are written with value_input_option="RAW" so amounts and
    dates stay exactly the strings we wrote.
    """

    def __init__(self, session: AuthSession, client: Optional[GoogleSheetsClient] = None):
        super().__init__(session)
        self._client = client or GoogleSheetsClient()

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _load(self, table: str) -> list[dict[str, str]]:
        columns = TABLE_COLUMNS[table]
        sheet = self._client.get_worksheet(table)
        all_rows = sheet.get_all_values()[1:]  # Skip header

        rows = []
        for values in all_rows:
            if not any(values):
                rows.append({})  # keep positions aligned with sheet rows
                continue
            padded = list(values) + [""] * (len(columns) - len(values))
            rows.append(dict(zip(columns, padded)))
        return rows

    def _append(self, table: str, rows: list[dict[str, str]]) -> None:
        columns = TABLE_COLUMNS[table]
        sheet = self._client.get_worksheet(table)
        sheet.append_rows(
            [[row[column] for column in columns] for row in rows],
            value_input_option="RAW",
        )

    def _write(self, table: str, position: int, row: dict[str, str]) -> None:
        sheet = self._client.get_worksheet(table)
        sheet_row = position + FIRST_DATA_ROW
        for col_idx, column in enumerate(TABLE_COLUMNS[table], start=1):
            sheet.update_cell(sheet_row, col_idx, row.get(column, ""))

    def _remove(self, table: str, position: int) -> None:
        sheet = self._client.get_worksheet(table)
        sheet.delete_rows(position + FIRST_DATA_ROW)

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from budget_bot.config import settings

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Column mapping: A=Timestamp, B=User, C=Type, D=Amount, E=Category,
# F=Daily limit, G=Spent today, H=Note
COLUMNS = ["Timestamp", "User", "Type", "Amount", "Category", "Daily limit", "Spent today", "Note"]


class SheetsClient:
    def __init__(self, spreadsheet_id: str, sheet_name: str, service_account_file: str | None = None):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._creds = Credentials.from_service_account_file(
            service_account_file or settings.google_service_account_file, scopes=SCOPES
        )
        self._build_service()

    def _build_service(self):
        service = build("sheets", "v4", credentials=self._creds)
        self.sheet = service.spreadsheets()

    def _execute_with_retry(self, request):
        """Execute a Google Sheets API request, rebuilding the connection on BrokenPipeError."""
        try:
            return request.execute()
        except BrokenPipeError:
            self._build_service()
            return request.execute()

    def _range(self, range_str: str) -> str:
        return f"{self.sheet_name}!{range_str}"

    def ensure_headers(self):
        """Write header row if the sheet is empty or missing headers."""
        result = self._execute_with_retry(self.sheet.values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self._range("A1:H1"),
        ))
        values = result.get("values", [])
        if not values or values[0] != COLUMNS:
            self._execute_with_retry(self.sheet.values().update(
                spreadsheetId=self.spreadsheet_id,
                range=self._range("A1"),
                valueInputOption="USER_ENTERED",
                body={"values": [COLUMNS]},
            ))

    def get_row_count(self) -> int:
        """Get total number of rows including header."""
        result = self._execute_with_retry(self.sheet.values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self._range("A:A"),
        ))
        return len(result.get("values", []))

    def append_row(self, row: list[str]) -> int:
        """Append a row and return the row number it was inserted at."""
        next_row = self.get_row_count() + 1
        self._execute_with_retry(self.sheet.values().update(
            spreadsheetId=self.spreadsheet_id,
            range=self._range(f"A{next_row}"),
            valueInputOption="USER_ENTERED",
            body={"values": [row]},
        ))
        return next_row

"""Best-effort sinks for per-message log rows.

``emit`` never raises: a broken spreadsheet must not cost the user a reply.
The webhook schedules ``emit`` as a background task, after the response.
"""

import logging
import threading

from budget_bot.config import Settings
from budget_bot.models import LogRow

logger = logging.getLogger(__name__)


class NullLogSink:
    """Used when no spreadsheet is configured."""

    def emit(self, row: LogRow):
        logger.debug(f"Log row (not exported): {row.as_row()}")


class SheetsLogSink:
    """Appends each row to a Google Sheet."""

    def __init__(self, client_factory):
        self._client_factory = client_factory
        self._client = None
        self._lock = threading.Lock()

    def _get_client(self):
        with self._lock:
            if self._client is None:
                client = self._client_factory()
                client.ensure_headers()
                self._client = client
            return self._client

    def emit(self, row: LogRow):
        try:
            row_number = self._get_client().append_row(row.as_row())
            logger.info(f"Logged {row.type} for {row.user_id} to sheet row {row_number}")
        except Exception:
            logger.exception(f"Failed to log {row.type} for {row.user_id} to Google Sheets")


def build_log_sink(settings: Settings):
    if not settings.google_sheets_spreadsheet_id:
        logger.info("No spreadsheet configured, log rows will not be exported")
        return NullLogSink()

    from budget_bot.sheets_client import SheetsClient

    def client_factory():
        return SheetsClient(
            settings.google_sheets_spreadsheet_id,
            settings.google_sheets_sheet_name,
            settings.google_service_account_file,
        )

    logger.info(f"Logging messages to spreadsheet {settings.google_sheets_spreadsheet_id}")
    return SheetsLogSink(client_factory)

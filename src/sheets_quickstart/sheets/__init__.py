"""Google Sheets API client with OAuth authentication.

Usage:
    from sheets_quickstart.sheets import SheetsClient, connect_sheets_client

    client = SheetsClient(connect_sheets_client())
    response = client.get_values(spreadsheet_id, "ClassData!A2:B")
"""

from __future__ import annotations

from sheets_quickstart.sheets.client import (
    SheetsClient,
    connect_sheets_client,
    write_range_for,
)
from sheets_quickstart.sheets.exceptions import SheetsAPIError

__all__ = ["SheetsClient", "SheetsAPIError", "connect_sheets_client", "write_range_for"]

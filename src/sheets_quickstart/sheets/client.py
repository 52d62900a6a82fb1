"""Google Sheets API client implementation."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, TextIO

import httplib2
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sheets_quickstart.config import SHEET_NAME
from sheets_quickstart.google.oauth import (
    CodeProvider,
    InteractiveAuthorizer,
    OAuthApp,
    get_client,
)
from sheets_quickstart.google.token_cache import TokenCache
from sheets_quickstart.sheets.exceptions import SheetsAPIError

logger = logging.getLogger(__name__)

# Failures raised while a request is executed: credential refresh and transport
_REQUEST_ERRORS = (
    google_auth_exceptions.GoogleAuthError,
    httplib2.HttpLib2Error,
    OSError,
)


def connect_sheets_client(
    client_secret_path: str | Path | None = None,
    cache: TokenCache | None = None,
    code_provider: CodeProvider | None = None,
    out: TextIO | None = None,
) -> Any:
    """Build an authorized Sheets v4 service.

    Args:
        client_secret_path: OAuth client credentials. Defaults to ./client_secret.json.
        cache: Token cache. Defaults to the per-user cache file.
        code_provider: Source of the authorization code. Defaults to stdin.
        out: Stream for user-facing messages.

    Raises:
        CredentialsNotFoundError: If the client secret file is missing.
        GoogleAuthError: If authorization fails.
    """
    app = OAuthApp.from_client_secrets(client_secret_path)
    cache = cache or TokenCache(out=out)
    authorizer = InteractiveAuthorizer(app, code_provider=code_provider, out=out)

    creds = get_client(app, cache, authorizer)
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def write_range_for(row_count: int, sheet_name: str = SHEET_NAME) -> str:
    """Range for the next row, leaving one blank row after ``row_count`` data rows.

    Data starts at row 2 (row 1 is the header), so the last filled row is
    ``row_count + 1`` and the write starts at ``row_count + 2``.
    """
    if row_count < 0:
        raise ValueError(f"row_count must be non-negative, got {row_count}")
    return f"{sheet_name}!A{row_count + 2}:B"


class SheetsClient:
    """Reads and writes cell values through a Sheets v4 service.

    Usage:
        client = SheetsClient(connect_sheets_client())

        # Read values
        response = client.get_values(spreadsheet_id, "ClassData!A2:B")
        rows = response.get("values", [])

        # Write values
        client.write_range(spreadsheet_id, "ClassData!A4:B", [["10/18/2026", "squash"]])

    API, credential refresh and transport errors are all raised as SheetsAPIError.
    """

    def __init__(self, service: Any) -> None:
        self._service = service

    # =========================================================================
    # Reading Data
    # =========================================================================

    def get_values(self, spreadsheet_id: str, range_notation: str) -> dict[str, Any]:
        """Read values from a range.

        Args:
            spreadsheet_id: Spreadsheet ID.
            range_notation: A1 notation (e.g., "ClassData!A2:B").

        Returns:
            The value range response. Cells are under "values", which is
            absent for an empty range; rows may differ in length.
        """
        request = (
            self._service.spreadsheets()
            .values()
            .get(spreadsheetId=spreadsheet_id, range=range_notation)
        )
        return _execute(request, "Unable to retrieve data from sheet")

    # =========================================================================
    # Writing Data
    # =========================================================================

    def write_range(
        self,
        spreadsheet_id: str,
        range_notation: str,
        values: list[list[Any]],
        value_input_option: str = "USER_ENTERED",
    ) -> int:
        """Write values to a range.

        Args:
            spreadsheet_id: Spreadsheet ID.
            range_notation: A1 notation (e.g., "ClassData!A4:B").
            values: 2D list of rows to write.
            value_input_option: How to interpret input ("RAW" or "USER_ENTERED").
                USER_ENTERED lets the sheet parse dates and numbers.

        Returns:
            Number of cells updated.
        """
        body = {"majorDimension": "ROWS", "values": values}
        request = (
            self._service.spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_notation,
                valueInputOption=value_input_option,
                body=body,
            )
        )
        result = _execute(request, "Unable to append data to sheet")

        updated = result.get("updatedCells", 0)
        logger.info(f"Updated {updated} cells in {range_notation}")
        return updated


def _execute(request: Any, prefix: str) -> dict[str, Any]:
    try:
        return request.execute()
    except HttpError as e:
        status = getattr(e.resp, "status", None)
        raise SheetsAPIError(
            f"{prefix}: {e}", status_code=int(status) if status else None
        ) from e
    except _REQUEST_ERRORS as e:
        raise SheetsAPIError(f"{prefix}: {e}") from e

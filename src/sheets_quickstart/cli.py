"""CLI for sheets-quickstart.

Usage:
    sheets-quickstart -id <spreadsheet-id>            # Read ClassData, append today's row
    sheets-quickstart -id <id> --reauth               # Discard cached token first
    sheets-quickstart -id <id> --client-secret PATH   # Use another client_secret.json

The first run prints an authorization URL and waits for the code to be
typed in; the resulting token is cached for later runs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import TextIO

from sheets_quickstart.config import (
    ACTIVITY,
    CLIENT_SECRET,
    READ_RANGE,
    TOKEN_CACHE_FILE,
)
from sheets_quickstart.google import (
    CredentialsNotFoundError,
    GoogleAuthError,
    TokenCache,
)
from sheets_quickstart.sheets import (
    SheetsAPIError,
    SheetsClient,
    connect_sheets_client,
    write_range_for,
)

logger = logging.getLogger(__name__)


def format_date(day: date) -> str:
    """Date as M/D/YYYY, which the sheet parses as a date."""
    return f"{day.month}/{day.day}/{day.year}"


def run(
    client: SheetsClient,
    spreadsheet_id: str,
    today: date | None = None,
    out: TextIO | None = None,
) -> str:
    """Print the ClassData rows and write today's row below them.

    Returns:
        The range that was written.

    Raises:
        SheetsAPIError: If the read or the write fails.
        IndexError: If a row has fewer than two columns.
    """
    out = out or sys.stdout
    today = today or date.today()

    print("reading spreadsheet", file=out)
    response = client.get_values(spreadsheet_id, READ_RANGE)
    print(response, file=out)

    rows = response.get("values", [])
    print(f"last Row: {len(rows)}", file=out)
    if rows:
        print("Name, Activity:", file=out)
        for i, row in enumerate(rows):
            print(i, file=out)
            print(f"{row[0]}, {row[1]}", file=out)
    else:
        print("No data found.", file=out)

    write_range = write_range_for(len(rows))
    client.write_range(spreadsheet_id, write_range, [[format_date(today), ACTIVITY]])
    print(f"Appended row to {write_range}", file=out)
    return write_range


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheets-quickstart",
        description="Read the ClassData sheet and append a dated activity row",
    )
    parser.add_argument(
        "-id",
        "--id",
        dest="spreadsheet_id",
        type=str,
        default="",
        help="Spreadsheet ID, found in the URL of the sheet",
    )
    parser.add_argument(
        "--client-secret",
        type=str,
        default=str(CLIENT_SECRET),
        help="Path to OAuth client credentials (default: ./client_secret.json)",
    )
    parser.add_argument(
        "--token-cache",
        type=str,
        default=str(TOKEN_CACHE_FILE),
        help="Path to the cached OAuth token",
    )
    parser.add_argument(
        "--reauth",
        action="store_true",
        help="Discard the cached token and authorize again",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    spreadsheet_id = args.spreadsheet_id
    print(f"id: {spreadsheet_id}")

    cache = TokenCache(args.token_cache)
    if args.reauth:
        cache.clear()

    print("Connecting to Sheets API")
    try:
        service = connect_sheets_client(args.client_secret, cache=cache)
    except CredentialsNotFoundError as e:
        print(f"Unable to read client secret file: {e}")
        return 1
    except GoogleAuthError as e:
        print(f"Unable to retrieve Sheets Client: {e}")
        return 1
    except OSError as e:
        print(f"Unable to cache oauth token: {e}")
        return 1

    try:
        run(SheetsClient(service), spreadsheet_id)
    except SheetsAPIError as e:
        print(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Paths and ranges used by the tool.

Files:
    ./client_secret.json                                       - OAuth client credentials
    ~/.credentials/sheets.googleapis.com-go-quickstart.json    - cached OAuth token
"""

from pathlib import Path
from urllib.parse import quote

# OAuth client credentials are read from the working directory
CLIENT_SECRET = Path("client_secret.json")

# If modifying the scopes, delete the cached token so it is re-authorized
TOKEN_CACHE_DIR = Path.home() / ".credentials"
TOKEN_CACHE_FILE = TOKEN_CACHE_DIR / quote("sheets.googleapis.com-go-quickstart.json", safe="")

SHEET_NAME = "ClassData"
# Open-ended range only captures filled cells; row 1 is the header
READ_RANGE = f"{SHEET_NAME}!A2:B"
ACTIVITY = "squash"

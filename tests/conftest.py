"""Shared fixtures."""

import json
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def client_secret(tmp_path):
    """Create a mock client_secret.json file."""
    creds = {
        "installed": {
            "client_id": "test-client-id.apps.googleusercontent.com",
            "client_secret": "test-client-secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["urn:ietf:wg:oauth:2.0:oob", "http://localhost"],
        }
    }
    creds_path = tmp_path / "client_secret.json"
    with open(creds_path, "w") as f:
        json.dump(creds, f)
    return creds_path


@pytest.fixture
def cached_token(tmp_path):
    """Create a mock token cache file."""
    token = {
        "access_token": "test-access-token",
        "token_type": "Bearer",
        "refresh_token": "test-refresh-token",
        "expiry": "2099-01-01T00:00:00Z",
    }
    token_path = tmp_path / ".credentials" / "token.json"
    token_path.parent.mkdir()
    with open(token_path, "w") as f:
        json.dump(token, f)
    return token_path


@pytest.fixture
def sheets_service():
    """Mock Sheets v4 service returning no rows and accepting updates."""
    service = MagicMock()
    values = service.spreadsheets.return_value.values.return_value
    values.get.return_value.execute.return_value = {"range": "ClassData!A2:B1000"}
    values.update.return_value.execute.return_value = {"updatedCells": 2}
    return service

"""Tests for Google OAuth authentication."""

import io
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from authlib.oauth2 import OAuth2Error

from sheets_quickstart.google import (
    CredentialsNotFoundError,
    GoogleAuthError,
    InteractiveAuthorizer,
    OAuthApp,
    Token,
    TokenCache,
    TokenError,
    get_client,
    read_code_from_stdin,
)
from sheets_quickstart.google.oauth import SCOPES, resolve_scopes


class TestOAuthAppBasics:
    """Test basic OAuthApp functionality."""

    def test_scope_resolution(self):
        """Should resolve scope names to URLs."""
        assert resolve_scopes(["sheets"]) == ["https://www.googleapis.com/auth/spreadsheets"]

    def test_unknown_scope_raises(self):
        """Should raise error for unknown scope names."""
        with pytest.raises(ValueError, match="Unknown scope"):
            resolve_scopes(["unknown_scope"])

    def test_full_url_scopes_accepted(self):
        """Should accept full scope URLs."""
        url = "https://www.googleapis.com/auth/drive"
        assert resolve_scopes([url]) == [url]

    def test_credentials_not_found(self, tmp_path):
        """Should raise error when client secret file is missing."""
        with pytest.raises(CredentialsNotFoundError):
            OAuthApp.from_client_secrets(tmp_path / "nonexistent.json")

    def test_available_scopes(self):
        """Should have the Sheets scopes defined."""
        assert "sheets" in SCOPES
        assert "sheets_readonly" in SCOPES


class TestOAuthAppWithCredentials:
    """Tests that require mock credentials."""

    def test_load_installed_credentials(self, client_secret):
        """Should load installed app credentials."""
        app = OAuthApp.from_client_secrets(client_secret)
        assert app.client_id == "test-client-id.apps.googleusercontent.com"
        assert app.client_secret == "test-client-secret"
        assert app.redirect_uri == "urn:ietf:wg:oauth:2.0:oob"
        assert app.scopes == ["https://www.googleapis.com/auth/spreadsheets"]

    def test_load_web_credentials(self, tmp_path):
        """Should load web app credentials."""
        creds = {
            "web": {
                "client_id": "web-client-id.apps.googleusercontent.com",
                "client_secret": "web-client-secret",
            }
        }
        creds_path = tmp_path / "client_secret.json"
        with open(creds_path, "w") as f:
            json.dump(creds, f)

        app = OAuthApp.from_client_secrets(creds_path)
        assert app.client_id == "web-client-id.apps.googleusercontent.com"
        assert app.redirect_uri == "http://localhost"
        assert app.token_uri == "https://oauth2.googleapis.com/token"

    def test_invalid_format(self, tmp_path):
        """Should reject files without an installed or web section."""
        creds_path = tmp_path / "client_secret.json"
        creds_path.write_text(json.dumps({"other": {}}))
        with pytest.raises(GoogleAuthError, match="Expected 'installed' or 'web'"):
            OAuthApp.from_client_secrets(creds_path)

    def test_invalid_json(self, tmp_path):
        """Should reject malformed JSON."""
        creds_path = tmp_path / "client_secret.json"
        creds_path.write_text("{")
        with pytest.raises(GoogleAuthError, match="Invalid JSON"):
            OAuthApp.from_client_secrets(creds_path)

    def test_get_authorization_url(self, client_secret):
        """Should generate an offline authorization URL."""
        url = OAuthApp.from_client_secrets(client_secret).get_authorization_url()
        assert url.startswith("https://accounts.google.com/o/oauth2/auth")
        assert "client_id=test-client-id.apps.googleusercontent.com" in url
        assert "scope=" in url
        assert "state=state-token" in url
        assert "access_type=offline" in url

    def test_exchange_code(self, client_secret):
        """Should convert the token endpoint response to a Token."""
        app = OAuthApp.from_client_secrets(client_secret)
        response = {
            "access_token": "fresh-token",
            "token_type": "Bearer",
            "refresh_token": "fresh-refresh",
            "expires_at": 4070908800,
        }
        with patch(
            "sheets_quickstart.google.oauth.OAuth2Session.fetch_token",
            return_value=response,
        ) as fetch:
            token = app.exchange_code("4/code")

        fetch.assert_called_once_with(app.token_uri, code="4/code")
        assert token.access_token == "fresh-token"
        assert token.refresh_token == "fresh-refresh"

    def test_exchange_code_failure(self, client_secret):
        """Should raise TokenError when the exchange is rejected."""
        app = OAuthApp.from_client_secrets(client_secret)
        with (
            patch(
                "sheets_quickstart.google.oauth.OAuth2Session.fetch_token",
                side_effect=OAuth2Error(error="invalid_grant"),
            ),
            pytest.raises(TokenError, match="Unable to retrieve token from web"),
        ):
            app.exchange_code("bad-code")

    def test_credentials(self, client_secret):
        """Should build refreshable google-auth credentials."""
        app = OAuthApp.from_client_secrets(client_secret)
        token = Token(
            access_token="abc",
            refresh_token="def",
            expiry=datetime(2099, 1, 1, tzinfo=timezone.utc),
        )
        creds = app.credentials(token)
        assert creds.token == "abc"
        assert creds.refresh_token == "def"
        assert creds.client_id == app.client_id
        assert creds.expiry == datetime(2099, 1, 1)
        assert creds.valid is True


class TestInteractiveAuthorizer:
    """Interactive authorization with a pluggable code provider."""

    def test_read_code_from_stdin(self):
        """Should return the first word, skipping blank lines."""
        assert read_code_from_stdin(io.StringIO("\n   4/abc extra\n")) == "4/abc"

    def test_read_code_end_of_input(self):
        """Should raise TokenError when input ends without a code."""
        with pytest.raises(TokenError, match="Unable to read authorization code"):
            read_code_from_stdin(io.StringIO("\n\n"))

    def test_authorize_prints_url_and_exchanges(self, client_secret):
        """Should print the URL and exchange the provided code."""
        app = OAuthApp.from_client_secrets(client_secret)
        out = io.StringIO()
        authorizer = InteractiveAuthorizer(app, code_provider=lambda: "4/code", out=out)

        with patch.object(app, "exchange_code", return_value=Token(access_token="abc")) as ex:
            token = authorizer.authorize()

        ex.assert_called_once_with("4/code")
        assert token.access_token == "abc"
        assert "Go to the following link in your browser" in out.getvalue()
        assert "accounts.google.com" in out.getvalue()

    def test_authorize_empty_code(self, client_secret):
        """Should fail without calling the token endpoint."""
        app = OAuthApp.from_client_secrets(client_secret)
        authorizer = InteractiveAuthorizer(app, code_provider=lambda: "  ", out=io.StringIO())

        with (
            patch.object(app, "exchange_code") as ex,
            pytest.raises(TokenError),
        ):
            authorizer.authorize()
        ex.assert_not_called()


class TestGetClient:
    """Cache-or-authorize client factory."""

    def test_uses_cached_token(self, client_secret, cached_token):
        """Should not authorize when a cached token exists."""
        app = OAuthApp.from_client_secrets(client_secret)
        authorizer = MagicMock()

        creds = get_client(app, TokenCache(cached_token), authorizer)

        authorizer.authorize.assert_not_called()
        assert creds.token == "test-access-token"

    def test_authorizes_and_persists_on_miss(self, client_secret, tmp_path):
        """Should authorize exactly once and save the new token."""
        app = OAuthApp.from_client_secrets(client_secret)
        cache = TokenCache(tmp_path / ".credentials" / "token.json", out=io.StringIO())
        authorizer = MagicMock()
        authorizer.authorize.return_value = Token(access_token="fresh", refresh_token="r")

        creds = get_client(app, cache, authorizer)

        authorizer.authorize.assert_called_once_with()
        assert cache.load() == Token(access_token="fresh", refresh_token="r")
        assert creds.token == "fresh"

    def test_authorizes_on_corrupt_cache(self, client_secret, tmp_path):
        """Should treat an undecodable cache as a miss."""
        path = tmp_path / "token.json"
        path.write_text("garbage")
        app = OAuthApp.from_client_secrets(client_secret)
        authorizer = MagicMock()
        authorizer.authorize.return_value = Token(access_token="fresh")

        get_client(app, TokenCache(path, out=io.StringIO()), authorizer)

        authorizer.authorize.assert_called_once_with()
        assert json.loads(path.read_text())["access_token"] == "fresh"

    def test_authorization_failure_propagates(self, client_secret, tmp_path):
        """Should not write the cache when authorization fails."""
        path = tmp_path / "token.json"
        app = OAuthApp.from_client_secrets(client_secret)
        authorizer = MagicMock()
        authorizer.authorize.side_effect = TokenError("denied")

        with pytest.raises(TokenError):
            get_client(app, TokenCache(path), authorizer)
        assert not path.exists()

    def test_authorizes_on_unreadable_cache(self, client_secret, tmp_path):
        """Should authorize when the cache path cannot be read."""
        path = tmp_path / "token.json"
        path.mkdir()
        app = OAuthApp.from_client_secrets(client_secret)
        authorizer = MagicMock()
        authorizer.authorize.return_value = Token(access_token="fresh")
        cache = TokenCache(path, out=io.StringIO())

        with patch.object(cache, "save") as save:
            creds = get_client(app, cache, authorizer)

        authorizer.authorize.assert_called_once_with()
        save.assert_called_once_with(Token(access_token="fresh"))
        assert creds.token == "fresh"

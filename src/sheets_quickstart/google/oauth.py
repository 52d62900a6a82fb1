"""Google OAuth for an installed application using Authlib.

This module provides:
- Loading the OAuth client from client_secret.json
- Interactive authorization with a pluggable code provider
- A cache-or-authorize client factory yielding auto-refreshing credentials

The token endpoint exchange is done with Authlib; the resulting token is
handed to google-auth Credentials, which refresh themselves on expiry.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import requests
from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials

from sheets_quickstart.config import CLIENT_SECRET
from sheets_quickstart.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    TokenError,
    TokenNotFoundError,
)
from sheets_quickstart.google.token_cache import Token, TokenCache

logger = logging.getLogger(__name__)


SCOPES = {
    "sheets": "https://www.googleapis.com/auth/spreadsheets",
    "sheets_readonly": "https://www.googleapis.com/auth/spreadsheets.readonly",
}

DEFAULT_SCOPES = ["sheets"]

# Opaque value echoed back by the authorization server
AUTH_STATE = "state-token"

CodeProvider = Callable[[], str]


def resolve_scopes(scopes: list[str]) -> list[str]:
    """Resolve scope names to full URLs."""
    resolved = []
    for scope in scopes:
        if scope.startswith("https://"):
            resolved.append(scope)
        elif scope in SCOPES:
            resolved.append(SCOPES[scope])
        else:
            raise ValueError(
                f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}"
            )
    return resolved


@dataclass
class OAuthApp:
    """Static application credentials from the Cloud Console."""

    client_id: str
    client_secret: str
    redirect_uri: str = "http://localhost"
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"
    token_uri: str = "https://oauth2.googleapis.com/token"
    scopes: list[str] = field(default_factory=lambda: resolve_scopes(DEFAULT_SCOPES))

    @classmethod
    def from_client_secrets(
        cls,
        path: str | Path | None = None,
        scopes: list[str] | None = None,
    ) -> OAuthApp:
        """Load OAuth client credentials from file.

        Args:
            path: Path to client_secret.json. Defaults to the working directory.
            scopes: Scope names (e.g., ["sheets"]) or full URLs.

        Raises:
            CredentialsNotFoundError: If the file does not exist.
            GoogleAuthError: If the file is not a valid client secrets document.
        """
        path = Path(path) if path else CLIENT_SECRET
        if not path.exists():
            raise CredentialsNotFoundError(str(path))

        try:
            with open(path) as f:
                creds = json.load(f)
        except json.JSONDecodeError as e:
            raise GoogleAuthError(f"Invalid JSON in client secret file: {e}") from e

        # Handle both web and installed app credential formats
        if "installed" in creds:
            app_creds = creds["installed"]
        elif "web" in creds:
            app_creds = creds["web"]
        else:
            raise GoogleAuthError(
                "Invalid client_secret.json format. Expected 'installed' or 'web' key."
            )

        try:
            client_id = app_creds["client_id"]
            client_secret = app_creds["client_secret"]
        except KeyError as e:
            raise GoogleAuthError(f"client_secret.json is missing {e}") from e

        redirect_uris = app_creds.get("redirect_uris") or ["http://localhost"]
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uris[0],
            auth_uri=app_creds.get("auth_uri", cls.auth_uri),
            token_uri=app_creds.get("token_uri", cls.token_uri),
            scopes=resolve_scopes(scopes or DEFAULT_SCOPES),
        )

    def session(self) -> OAuth2Session:
        return OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.scopes),
            redirect_uri=self.redirect_uri,
            token_endpoint_auth_method="client_secret_post",
        )

    def get_authorization_url(self) -> str:
        """Authorization URL requesting offline access."""
        url, _ = self.session().create_authorization_url(
            self.auth_uri,
            state=AUTH_STATE,
            access_type="offline",
        )
        return url

    def exchange_code(self, code: str) -> Token:
        """Exchange an authorization code for a token.

        Raises:
            TokenError: If the token endpoint rejects the code or is unreachable.
        """
        try:
            response = self.session().fetch_token(self.token_uri, code=code)
        except (OAuth2Error, requests.RequestException) as e:
            raise TokenError(f"Unable to retrieve token from web: {e}") from e

        logger.info("Authorization code exchanged for token")
        return Token.from_oauth_response(response)

    def credentials(self, token: Token) -> GoogleCredentials:
        """Wrap a token in google-auth credentials that refresh on expiry."""
        expiry = token.expiry
        if expiry is not None:
            # google-auth compares against naive UTC
            expiry = expiry.replace(tzinfo=None)

        return GoogleCredentials(
            token=token.access_token or None,
            refresh_token=token.refresh_token,
            token_uri=self.token_uri,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.scopes,
            expiry=expiry,
        )


def read_code_from_stdin(stream: TextIO | None = None) -> str:
    """Read one whitespace-delimited word, skipping blank lines.

    Raises:
        TokenError: If the stream ends before a code is entered.
    """
    stream = stream or sys.stdin
    for line in stream:
        words = line.split()
        if words:
            return words[0]
    raise TokenError("Unable to read authorization code: end of input")


class InteractiveAuthorizer:
    """Obtains a fresh token by asking a human to authorize the app.

    Example:
        >>> authorizer = InteractiveAuthorizer(app, code_provider=lambda: "4/abc")
        >>> token = authorizer.authorize()
    """

    def __init__(
        self,
        app: OAuthApp,
        code_provider: CodeProvider | None = None,
        out: TextIO | None = None,
    ):
        self.app = app
        self.code_provider = code_provider or read_code_from_stdin
        self.out = out or sys.stdout

    def authorize(self) -> Token:
        """Print the authorization URL, wait for the code and exchange it.

        Raises:
            TokenError: If no code could be read or the exchange fails.
        """
        url = self.app.get_authorization_url()
        print(
            "Go to the following link in your browser then type the "
            f"authorization code: \n{url}",
            file=self.out,
        )

        code = self.code_provider().strip()
        if not code:
            raise TokenError("Unable to read authorization code")

        return self.app.exchange_code(code)


def get_client(
    app: OAuthApp,
    cache: TokenCache,
    authorizer: InteractiveAuthorizer,
) -> GoogleCredentials:
    """Credentials from the cached token, authorizing interactively on a miss.

    A freshly authorized token is persisted before it is returned. A cached
    token is used as-is; expiry is handled by the credentials' own refresh.
    """
    try:
        token = cache.load()
    except TokenNotFoundError as e:
        logger.info(f"Cached token unavailable ({e}), starting authorization")
        token = authorizer.authorize()
        cache.save(token)

    return app.credentials(token)

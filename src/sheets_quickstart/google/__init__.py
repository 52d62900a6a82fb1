"""Google OAuth authentication and token caching."""

from sheets_quickstart.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    TokenDecodeError,
    TokenError,
    TokenNotFoundError,
)
from sheets_quickstart.google.oauth import (
    InteractiveAuthorizer,
    OAuthApp,
    get_client,
    read_code_from_stdin,
)
from sheets_quickstart.google.token_cache import Token, TokenCache

__all__ = [
    "OAuthApp",
    "InteractiveAuthorizer",
    "get_client",
    "read_code_from_stdin",
    "Token",
    "TokenCache",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
    "TokenNotFoundError",
    "TokenDecodeError",
]

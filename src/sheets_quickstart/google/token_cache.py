"""On-disk cache for the OAuth token.

The token is stored as a JSON object using the standard OAuth2 field names::

    {
      "access_token": "...",
      "token_type": "Bearer",
      "refresh_token": "...",
      "expiry": "2026-10-18T12:00:00+00:00"
    }

The cache is a single file per user. Concurrent runs are not coordinated;
whichever process writes last wins.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from sheets_quickstart.config import TOKEN_CACHE_FILE
from sheets_quickstart.google.exceptions import TokenDecodeError, TokenNotFoundError

logger = logging.getLogger(__name__)

# Year-one timestamps are how some OAuth clients spell "no expiry"
_ZERO_YEAR = 1


@dataclass(frozen=True)
class Token:
    """OAuth2 credential as returned by the token endpoint."""

    access_token: str = ""
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expiry: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        """Build a token from its JSON form. Missing fields stay empty."""
        expiry = data.get("expiry")
        if isinstance(expiry, str) and expiry:
            expiry = _parse_expiry(expiry)
        elif isinstance(expiry, (int, float)):
            expiry = datetime.fromtimestamp(expiry, tz=timezone.utc)
        else:
            expiry = None

        return cls(
            access_token=data.get("access_token") or "",
            token_type=data.get("token_type") or "Bearer",
            refresh_token=data.get("refresh_token") or None,
            expiry=expiry,
        )

    @classmethod
    def from_oauth_response(cls, token: dict[str, Any]) -> Token:
        """Build a token from an Authlib token dict (``expires_at`` in epoch seconds)."""
        expires_at = token.get("expires_at")
        return cls(
            access_token=token.get("access_token", ""),
            token_type=token.get("token_type", "Bearer"),
            refresh_token=token.get("refresh_token"),
            expiry=datetime.fromtimestamp(expires_at, tz=timezone.utc) if expires_at else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
        }
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        if self.expiry:
            data["expiry"] = self.expiry.isoformat()
        return data


def _parse_expiry(value: str) -> datetime | None:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.year == _ZERO_YEAR:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class TokenCache:
    """Reads and writes the cached OAuth token.

    Example:
        >>> cache = TokenCache()
        >>> try:
        ...     token = cache.load()
        ... except TokenNotFoundError:
        ...     token = authorizer.authorize()
        ...     cache.save(token)
    """

    def __init__(self, path: str | Path | None = None, out: TextIO | None = None):
        """Initialize the cache.

        Args:
            path: Token file. Defaults to ~/.credentials/sheets.googleapis.com-go-quickstart.json.
            out: Stream for user-facing messages. Defaults to stdout.
        """
        self.path = Path(path) if path else TOKEN_CACHE_FILE
        self.out = out or sys.stdout

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Token:
        """Load the cached token.

        Returns:
            The cached Token. Fields missing from the file are left empty.

        Raises:
            TokenNotFoundError: If the cache file does not exist or cannot be read.
            TokenDecodeError: If the cache file is not a valid token document.
        """
        if not self.path.exists():
            logger.info(f"No cached token at {self.path}")
            raise TokenNotFoundError(str(self.path))

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TokenDecodeError(str(self.path), str(e)) from e
        except OSError as e:
            logger.warning(f"Unable to read cached token {self.path}: {e}")
            raise TokenNotFoundError(str(self.path), f"Unable to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise TokenDecodeError(str(self.path), "expected a JSON object")

        try:
            token = Token.from_dict(data)
        except ValueError as e:
            raise TokenDecodeError(str(self.path), str(e)) from e

        logger.info(f"Loaded cached token from {self.path}")
        return token

    def save(self, token: Token) -> None:
        """Write the token, replacing any previous cache file.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        print(f"Saving credential file to: {self.path}", file=self.out)
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

        fd = os.open(self.path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(token.to_dict(), f)
            f.write("\n")

        logger.info(f"Token saved to {self.path}")

    def clear(self) -> bool:
        """Remove the cached token.

        Returns:
            True if a file was removed.
        """
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info(f"Removed cached token {self.path}")
        return True

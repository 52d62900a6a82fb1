"""Google authentication exceptions."""


class GoogleAuthError(Exception):
    """Base exception for Google authentication errors."""

    pass


class CredentialsNotFoundError(GoogleAuthError):
    """Raised when OAuth credentials file is not found."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Credentials file not found at {path}. "
            "Please download OAuth credentials from Google Cloud Console."
        )


class TokenError(GoogleAuthError):
    """Raised when there's an issue with the OAuth token."""

    pass


class TokenNotFoundError(TokenError):
    """Raised when no cached token is available."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"No cached token at {path}")


class TokenDecodeError(TokenNotFoundError):
    """Raised when the cached token file is not valid JSON."""

    def __init__(self, path: str, reason: str):
        self.reason = reason
        super().__init__(path, f"Unable to decode cached token at {path}: {reason}")

"""Exception hierarchy for the ynote_client library."""

from __future__ import annotations

# Server error code for a rejected or expired access token
TOKEN_INVALID_CODE = "1007"


class YnoteError(Exception):
    """Base exception for all ynote_client errors."""

    pass


class AuthorizationError(YnoteError):
    """Raised when the OAuth authorization flow is rejected.

    The status_code and body attributes hold the provider's response, when
    there was one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SessionError(YnoteError):
    """Raised when an operation needs an access token and none is set."""

    pass


class ServerError(YnoteError):
    """Raised when the server reports a failure (HTTP 500 with a JSON body).

    Callers branch on the code attribute, e.g. ``err.code == "1007"`` means
    the access token must be re-authorized.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @property
    def is_token_invalid(self) -> bool:
        """Whether the server rejected the access token."""
        return self.code == TOKEN_INVALID_CODE


class MalformedResponseError(YnoteError):
    """Raised when a response body is not the expected JSON."""

    def __init__(self, message: str, body: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.body = body
        self.status_code = status_code

"""Exception hierarchy for twitchclip.

Every error raised by the client derives from :class:`TwitchClipError`, so
callers can catch the whole family in one place or branch on the concrete
subclass.  Nothing is retried or swallowed internally: each failure reaches
the immediate caller.

Subclass hierarchy::

    TwitchClipError
    +-- MissingCredentialsError   (construction without client id / secret)
    +-- InvalidUsageError         (empty broadcaster or clip id)
    +-- UnauthenticatedError      (create_clip before any token is known)
    +-- MissingClientIdError      (get_clip without a client id)
    +-- TransportError            (connection, timeout)
    |   +-- RequestCancelledError
    |   +-- DeadlineExceededError
    +-- ApiError                  (non-success response from Twitch)
    +-- DecodeError               (malformed body on a success status)
    +-- EmptyResultError          (success status but no data)
    +-- ConfigError               (unresolvable settings or credentials)
"""

from __future__ import annotations

from typing import Any, Optional


class TwitchClipError(Exception):
    """Base exception for all twitchclip errors."""


class MissingCredentialsError(TwitchClipError):
    """Raised when a client is constructed without a client id or secret."""

    def __init__(self, message: str = "Missing Client-Secret or Client-ID"):
        super().__init__(message)


class InvalidUsageError(TwitchClipError):
    """Raised for invalid arguments, e.g. an empty broadcaster or clip id."""


class UnauthenticatedError(TwitchClipError):
    """Raised when a bearer-authenticated call is made without any token."""

    def __init__(self, message: str = "Authenticate first: no access token or auth result"):
        super().__init__(message)


class MissingClientIdError(TwitchClipError):
    """Raised when a Client-ID authenticated call is made without a client id."""

    def __init__(self, message: str = "Client-ID missing"):
        super().__init__(message)


class TransportError(TwitchClipError):
    """Raised on network-level failures (DNS, refused connection, timeout)."""


class RequestCancelledError(TransportError):
    """Raised when the caller's :class:`~twitchclip.context.Context` is cancelled."""


class DeadlineExceededError(TransportError):
    """Raised when the caller's :class:`~twitchclip.context.Context` deadline passes."""


class ApiError(TwitchClipError):
    """A non-success response from the Twitch API.

    Mirrors the error body Twitch sends back::

        {"error": "Unauthorized", "message": "Token invalid", "status": 401}

    Args:
        label: Short error label (the ``error`` field).
        message: Human-readable description (the ``message`` field).
        status: Numeric HTTP status code.
    """

    def __init__(self, label: str, message: str, status: int):
        self.label = label
        self.message = message
        self.status = status
        super().__init__(f"HTTP {status} {label}: {message}" if label else f"HTTP {status}: {message}")

    @property
    def is_unauthorized(self) -> bool:
        """Whether the API rejected the credentials (HTTP 401)."""
        return self.status == 401


class DecodeError(TwitchClipError):
    """A response body on a success status that could not be decoded.

    Args:
        raw_body: The body exactly as received.
        cause: The underlying parse / validation error.
        partial: Best-effort result salvaged from the body, if any.
    """

    def __init__(self, raw_body: bytes, cause: Exception, partial: Optional[Any] = None):
        self.raw_body = raw_body
        self.cause = cause
        self.partial = partial
        text = raw_body.decode("utf-8", errors="replace")
        super().__init__(f"failed decoding body: {text[:200]!r} with error: {cause}")


class EmptyResultError(TwitchClipError):
    """Raised when a success response carries an empty ``data`` list."""


class ConfigError(TwitchClipError):
    """Raised for configuration problems (invalid JSON, missing credential sources)."""

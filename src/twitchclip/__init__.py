"""twitchclip -- a small client for the Twitch clips API.

The library refreshes an OAuth token pair, creates clips for a broadcaster,
and fetches clip metadata.  It keeps one piece of mutable state per client,
the current token pair, which only a successful refresh replaces.

Typical use::

    from twitchclip import Context, TwitchClient

    with TwitchClient(client_id, client_secret, refresh_token=token) as client:
        client.refresh_auth_token()
        clip_id = client.create_clip("44445592", Context.with_timeout(10))
        clip = client.get_clip(clip_id)

Modules:
    client: Blocking and async API clients.
    context: Cancellation / deadline signal passed to every operation.
    models: Pydantic models for wire bodies and configuration.
    config: XDG-aware settings and credential-source resolution.
    exceptions: Exception hierarchy.
"""

from twitchclip.client import AsyncTwitchClient, TwitchClient
from twitchclip.context import Context
from twitchclip.exceptions import (
    ApiError,
    ConfigError,
    DeadlineExceededError,
    DecodeError,
    EmptyResultError,
    InvalidUsageError,
    MissingClientIdError,
    MissingCredentialsError,
    RequestCancelledError,
    TransportError,
    TwitchClipError,
    UnauthenticatedError,
)
from twitchclip.models import AuthResponse, Clip, ClipRecord, CreatedClip

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AsyncTwitchClient",
    "AuthResponse",
    "Clip",
    "ClipRecord",
    "ConfigError",
    "Context",
    "CreatedClip",
    "DeadlineExceededError",
    "DecodeError",
    "EmptyResultError",
    "InvalidUsageError",
    "MissingClientIdError",
    "MissingCredentialsError",
    "RequestCancelledError",
    "TransportError",
    "TwitchClient",
    "TwitchClipError",
    "UnauthenticatedError",
]

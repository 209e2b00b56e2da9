"""Pydantic models shared across twitchclip.

The models fall into two groups:

**Wire models** -- the JSON bodies exchanged with the Twitch API:
    :class:`AuthResponse`, :class:`CreatedClip`, :class:`ClipCreateResponse`,
    :class:`ClipRecord`, :class:`Clip`, and :class:`ErrorResponse`.

**Configuration models** -- loaded from the user's config file and resolved
into secrets by :mod:`twitchclip.config`:
    :class:`RequestConfig`, :class:`ClientSettings`, and :class:`Credentials`.

Wire models ignore unknown fields so that additions on the Twitch side do not
break decoding.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Auth ---


class AuthResponse(BaseModel):
    """Token pair returned by the refresh-token grant.

    Both tokens are required; a body missing either one fails validation,
    which keeps a half-populated pair from ever reaching the client session.

    Example::

        AuthResponse(access_token="abc", refresh_token="def", scope=["clips:edit"])
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    scope: list[str] = Field(default_factory=list)
    expires_in: Optional[int] = None
    token_type: Optional[str] = None


# --- Clips ---


class CreatedClip(BaseModel):
    """One element of the clip-creation response."""

    id: str
    edit_url: str = ""


class ClipCreateResponse(BaseModel):
    """Body of ``POST /helix/clips``."""

    data: list[CreatedClip] = Field(default_factory=list)


class ClipRecord(BaseModel):
    """Metadata of a single clip as returned by ``GET /helix/clips``."""

    broadcaster_id: str = ""
    created_at: str = ""
    creator_id: str = ""
    embed_url: str = ""
    game_id: str = ""
    id: str = ""
    language: str = ""
    thumbnail_url: str = ""
    title: str = ""
    url: str = ""
    video_id: str = ""
    view_count: int = 0


class Clip(BaseModel):
    """List wrapper around :class:`ClipRecord` (body of ``GET /helix/clips``)."""

    data: list[ClipRecord] = Field(default_factory=list)

    @property
    def first(self) -> Optional[ClipRecord]:
        """The first record, or ``None`` when the list is empty."""
        return self.data[0] if self.data else None


# --- Errors ---


class ErrorResponse(BaseModel):
    """Error body returned by the Twitch API on non-success statuses."""

    error: str = ""
    message: str = ""
    status: int = 0


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP transport settings applied to every request."""

    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class ClientSettings(BaseModel):
    """User configuration for building a client.

    Credentials are not stored directly; each ``*_source`` field is a source
    descriptor understood by :func:`twitchclip.config.resolve_credential`
    (``env:VAR``, ``file:/path`` or ``prompt``).

    Example::

        ClientSettings(
            client_id_source="env:TWITCH_CLIENT_ID",
            client_secret_source="file:~/.twitch/secret",
        )
    """

    client_id_source: str = Field(
        default="env:TWITCH_CLIENT_ID", description="Source of the client id"
    )
    client_secret_source: str = Field(
        default="env:TWITCH_CLIENT_SECRET", description="Source of the client secret"
    )
    access_token_source: Optional[str] = Field(
        default="env:TWITCH_ACCESS_TOKEN",
        description="Optional source of an initial access token",
    )
    refresh_token_source: Optional[str] = Field(
        default="env:TWITCH_REFRESH_TOKEN",
        description="Optional source of an initial refresh token",
    )
    scopes: list[str] = Field(
        default_factory=lambda: ["clips:edit"],
        description="Scopes requested when refreshing the token pair",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class Credentials(BaseModel):
    """Secrets resolved from :class:`ClientSettings`."""

    client_id: str
    client_secret: str
    access_token: str = ""
    refresh_token: str = ""

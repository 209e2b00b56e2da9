"""Blocking Twitch API client.

This module provides :class:`TwitchClient`, which wraps one reusable
:class:`httpx.Client` and exposes the three supported operations:

- **Token refresh** -- :meth:`TwitchClient.refresh_auth_token` exchanges the
  stored refresh token for a new token pair and updates the session.
- **Clip creation** -- :meth:`TwitchClient.create_clip` clips the live stream
  of a broadcaster using the bearer token.
- **Clip lookup** -- :meth:`TwitchClient.get_clip` fetches clip metadata using
  only the ``Client-ID`` header.

Each operation accepts an optional :class:`~twitchclip.context.Context`.  The
context is checked before the request is sent, its deadline caps the request
timeout, and a cancellation that lands while the request is in flight
discards the response when it arrives.

See Also:
    :class:`~twitchclip.client.async_client.AsyncTwitchClient` for the
    non-blocking equivalent, which can abort a request mid-flight.
"""

from __future__ import annotations

import logging
from typing import Any, Collection, Iterable, Optional

import httpx

from twitchclip.client.request import CLIPS_PATH, TOKEN_PATH, build_request, request_timeout
from twitchclip.client.response import (
    STATUS_OK,
    classify_response,
    decode_auth,
    decode_clip,
    decode_created_clips,
)
from twitchclip.client.session import DEFAULT_SCOPES, Session
from twitchclip.context import Context
from twitchclip.exceptions import (
    DeadlineExceededError,
    EmptyResultError,
    RequestCancelledError,
    TransportError,
)
from twitchclip.models import AuthResponse, Clip, ClientSettings, CreatedClip

logger = logging.getLogger(__name__)


class TwitchClient(Session):
    """Synchronous client for the Twitch clips API.

    Args:
        client_id: Twitch application client id.  Required.
        client_secret: Twitch application client secret.  Required.
        access_token: Optional initial access token.
        refresh_token: Optional initial refresh token.
        scopes: Scopes requested on token refresh.
        timeout: Per-request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Raises:
        MissingCredentialsError: If *client_id* or *client_secret* is empty.

    Example::

        with TwitchClient("id", "secret", refresh_token="r") as client:
            client.refresh_auth_token()
            clip_id = client.create_clip("44445592")
            print(client.get_clip(clip_id).first.url)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        access_token: str = "",
        refresh_token: str = "",
        *,
        scopes: Iterable[str] = DEFAULT_SCOPES,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(client_id, client_secret, access_token, refresh_token, scopes)
        self._timeout = timeout
        self._client = httpx.Client(timeout=timeout, verify=verify_ssl, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        **kwargs: Any,
    ) -> TwitchClient:
        """Build a client from configuration.

        Args:
            settings: Settings to use.  Loaded with
                :func:`~twitchclip.config.load_settings` when ``None``.
            **kwargs: Forwarded to the constructor (e.g. ``transport``).

        Raises:
            ConfigError: If a required credential cannot be resolved.
            MissingCredentialsError: If a resolved client id or secret is empty.
        """
        from twitchclip.config import load_settings, resolve_credentials

        if settings is None:
            settings = load_settings()
        creds = resolve_credentials(settings)
        return cls(
            creds.client_id,
            creds.client_secret,
            creds.access_token,
            creds.refresh_token,
            scopes=settings.scopes,
            timeout=settings.request.timeout,
            verify_ssl=settings.request.verify_ssl,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> TwitchClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._client.close()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def refresh_auth_token(self, ctx: Optional[Context] = None) -> AuthResponse:
        """Exchange the stored refresh token for a new token pair.

        On success the session's ``access_token``, ``refresh_token`` and
        ``auth`` are replaced together; on any failure they are left as they
        were.

        Args:
            ctx: Cancellation / deadline context.

        Returns:
            The decoded :class:`~twitchclip.models.AuthResponse`.

        Raises:
            ApiError: On any status other than 200.
            DecodeError: If the 200 body is not a valid token document.
            TransportError: On network failure, cancellation or deadline.
        """
        ctx = self._context(ctx)
        request = build_request(
            self._client, "POST", TOKEN_PATH,
            data=self._refresh_form(),
            timeout=request_timeout(self._timeout, ctx.remaining()),
        )
        body = self._send(request, ctx, expected=STATUS_OK)
        auth = decode_auth(body)
        self._store_auth(auth)
        return auth

    def create_clip(self, broadcaster_id: str, ctx: Optional[Context] = None) -> str:
        """Create a clip of *broadcaster_id*'s stream and return its id.

        Raises:
            InvalidUsageError: If *broadcaster_id* is empty.
            UnauthenticatedError: If no access token is known (no request is sent).
            EmptyResultError: If the API answers with an empty ``data`` list.
            ApiError: On a non-2xx status.
            DecodeError: If the body cannot be decoded.
            TransportError: On network failure, cancellation or deadline.
        """
        return self.create_clip_info(broadcaster_id, ctx).id

    def create_clip_info(self, broadcaster_id: str, ctx: Optional[Context] = None) -> CreatedClip:
        """Like :meth:`create_clip` but return the id together with the edit URL."""
        self._require_argument(broadcaster_id, "broadcaster_id")
        token = self._bearer_token()
        ctx = self._context(ctx)
        request = build_request(
            self._client, "POST", CLIPS_PATH,
            params={"broadcaster_id": broadcaster_id},
            bearer=token,
            timeout=request_timeout(self._timeout, ctx.remaining()),
        )
        created = decode_created_clips(self._send(request, ctx))
        if not created.data:
            raise EmptyResultError(f"no clip returned for broadcaster {broadcaster_id}")
        return created.data[0]

    def get_clip(self, clip_id: str, ctx: Optional[Context] = None) -> Clip:
        """Fetch metadata of *clip_id*.

        Returns:
            The full :class:`~twitchclip.models.Clip` list wrapper.

        Raises:
            InvalidUsageError: If *clip_id* is empty.
            MissingClientIdError: If the session has no client id (no request is sent).
            ApiError: On any status other than 200.
            DecodeError: If the body cannot be decoded; ``partial`` holds the
                records that could be parsed.
            TransportError: On network failure, cancellation or deadline.
        """
        self._require_argument(clip_id, "clip_id")
        client_id = self._require_client_id()
        ctx = self._context(ctx)
        request = build_request(
            self._client, "GET", CLIPS_PATH,
            params={"id": clip_id},
            client_id=client_id,
            timeout=request_timeout(self._timeout, ctx.remaining()),
        )
        return decode_clip(self._send(request, ctx, expected=STATUS_OK))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(
        self,
        request: httpx.Request,
        ctx: Context,
        expected: Optional[Collection[int]] = None,
    ) -> bytes:
        """Send *request*, honour *ctx*, and return the classified body."""
        ctx.check()
        try:
            response = self._client.send(request)
        except httpx.TimeoutException as exc:
            if ctx.expired:
                raise DeadlineExceededError("deadline exceeded") from exc
            raise TransportError(f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed {request.method} request: {exc}") from exc

        # send() without streaming has already read and closed the response.
        body = response.content
        logger.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
        if ctx.cancelled:
            raise RequestCancelledError("request cancelled")
        return classify_response(response.status_code, body, response.reason_phrase, expected)

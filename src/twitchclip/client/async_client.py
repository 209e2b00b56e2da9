"""Asynchronous Twitch API client -- mirrors :class:`~twitchclip.client.sync_client.TwitchClient`.

This module provides :class:`AsyncTwitchClient`, the non-blocking counterpart
to :class:`~twitchclip.client.sync_client.TwitchClient`.  It wraps
:class:`httpx.AsyncClient` and offers the same operations with the same
session semantics, but the send runs as an :mod:`asyncio` task so that a
:class:`~twitchclip.context.Context` can abort it while it is in flight:
cancelling the context cancels the task from any thread, and the deadline is
enforced with :func:`asyncio.wait_for`.

See Also:
    :class:`~twitchclip.client.sync_client.TwitchClient` for the blocking
    equivalent.
"""

from __future__ import annotations

import asyncio
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


class AsyncTwitchClient(Session):
    """Asynchronous client for the Twitch clips API.

    Takes the same arguments as
    :class:`~twitchclip.client.sync_client.TwitchClient`, except that
    *transport* must be an :class:`httpx.AsyncBaseTransport`.  Use it as an
    async context manager or call :meth:`aclose` when done.

    Example::

        async with AsyncTwitchClient("id", "secret", access_token="t") as client:
            clip_id = await client.create_clip("44445592", Context.with_timeout(10))
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
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(client_id, client_secret, access_token, refresh_token, scopes)
        self._timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, verify=verify_ssl, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[ClientSettings] = None,
        **kwargs: Any,
    ) -> AsyncTwitchClient:
        """Build a client from configuration (see :meth:`TwitchClient.from_settings`)."""
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
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncTwitchClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def refresh_auth_token(self, ctx: Optional[Context] = None) -> AuthResponse:
        """Exchange the stored refresh token for a new token pair.

        Behaves identically to
        :meth:`~twitchclip.client.sync_client.TwitchClient.refresh_auth_token`.
        """
        ctx = self._context(ctx)
        request = build_request(
            self._client, "POST", TOKEN_PATH,
            data=self._refresh_form(),
            timeout=request_timeout(self._timeout, ctx.remaining()),
        )
        auth = decode_auth(await self._send(request, ctx, expected=STATUS_OK))
        self._store_auth(auth)
        return auth

    async def create_clip(self, broadcaster_id: str, ctx: Optional[Context] = None) -> str:
        """Create a clip of *broadcaster_id*'s stream and return its id."""
        created = await self.create_clip_info(broadcaster_id, ctx)
        return created.id

    async def create_clip_info(
        self,
        broadcaster_id: str,
        ctx: Optional[Context] = None,
    ) -> CreatedClip:
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
        created = decode_created_clips(await self._send(request, ctx))
        if not created.data:
            raise EmptyResultError(f"no clip returned for broadcaster {broadcaster_id}")
        return created.data[0]

    async def get_clip(self, clip_id: str, ctx: Optional[Context] = None) -> Clip:
        """Fetch metadata of *clip_id*."""
        self._require_argument(clip_id, "clip_id")
        client_id = self._require_client_id()
        ctx = self._context(ctx)
        request = build_request(
            self._client, "GET", CLIPS_PATH,
            params={"id": clip_id},
            client_id=client_id,
            timeout=request_timeout(self._timeout, ctx.remaining()),
        )
        return decode_clip(await self._send(request, ctx, expected=STATUS_OK))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _send(
        self,
        request: httpx.Request,
        ctx: Context,
        expected: Optional[Collection[int]] = None,
    ) -> bytes:
        """Send *request* as a task that *ctx* can abort, and classify the result."""
        ctx.check()
        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(self._client.send(request))
        remove = ctx.on_cancel(lambda: loop.call_soon_threadsafe(task.cancel))
        try:
            response = await asyncio.wait_for(task, timeout=ctx.remaining())
        except asyncio.TimeoutError as exc:
            raise DeadlineExceededError("deadline exceeded") from exc
        except asyncio.CancelledError:
            if ctx.cancelled and not _current_task_cancelling():
                raise RequestCancelledError("request cancelled") from None
            raise
        except httpx.TimeoutException as exc:
            if ctx.expired:
                raise DeadlineExceededError("deadline exceeded") from exc
            raise TransportError(f"Request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed {request.method} request: {exc}") from exc
        finally:
            remove()

        body = response.content
        logger.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
        return classify_response(response.status_code, body, response.reason_phrase, expected)


def _current_task_cancelling() -> bool:
    """Whether the running task itself has a pending cancellation request."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0

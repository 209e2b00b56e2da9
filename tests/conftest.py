"""Shared test fixtures for twitchclip.

Provides a recording mock transport so client tests can script the Twitch
API's answers and inspect exactly which requests were sent, plus a sample
clip record used across test modules.  These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest


class RecordingTransport(httpx.MockTransport):
    """:class:`httpx.MockTransport` that keeps every request it handled.

    Works for both :class:`httpx.Client` and :class:`httpx.AsyncClient`.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


# ---------------------------------------------------------------------------
# Transport fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_api() -> Callable[..., RecordingTransport]:
    """Factory building a :class:`RecordingTransport`.

    Call it with a handler function, or with ``status`` and ``json`` /
    ``content`` to answer every request with the same response::

        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
    """

    def factory(
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        *,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
    ) -> RecordingTransport:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                if content is not None:
                    return httpx.Response(status, content=content)
                return httpx.Response(status, json=json)

        return RecordingTransport(handler)

    return factory


# ---------------------------------------------------------------------------
# Sample bodies
# ---------------------------------------------------------------------------


@pytest.fixture
def clip_record() -> dict[str, Any]:
    """A fully populated clip record as Twitch returns it."""
    return {
        "broadcaster_id": "44445592",
        "created_at": "2018-06-19T18:02:41Z",
        "creator_id": "18074328",
        "embed_url": "https://clips.twitch.tv/embed?clip=AwkwardHelplessSalamanderSwiftRage",
        "game_id": "33214",
        "id": "AwkwardHelplessSalamanderSwiftRage",
        "language": "en",
        "thumbnail_url": "https://clips-media-assets.twitch.tv/157589949-preview-480x272.jpg",
        "title": "A good clip",
        "url": "https://clips.twitch.tv/AwkwardHelplessSalamanderSwiftRage",
        "video_id": "",
        "view_count": 1500,
    }

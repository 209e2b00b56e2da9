"""HTTP client module for twitchclip.

Provides blocking and asynchronous clients for the Twitch clips API that
wrap :mod:`httpx`, share one session model, and map every response onto the
typed models in :mod:`twitchclip.models` or the exceptions in
:mod:`twitchclip.exceptions`.

Classes:
    :class:`TwitchClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncTwitchClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Example::

    from twitchclip.client import TwitchClient

    with TwitchClient(client_id, client_secret, refresh_token=token) as client:
        client.refresh_auth_token()
        clip_id = client.create_clip("44445592")
"""

from twitchclip.client.async_client import AsyncTwitchClient
from twitchclip.client.sync_client import TwitchClient

__all__ = ["TwitchClient", "AsyncTwitchClient"]

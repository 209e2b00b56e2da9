"""Request construction for the Twitch API.

Every request goes to the fixed host ``api.twitch.tv`` over HTTPS and carries
at most one authentication header:

* ``Authorization: Bearer <token>`` for write operations (clip creation),
* ``Client-ID: <id>`` for read-only lookups,
* nothing for the token refresh itself, whose credentials travel in the
  form body.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import httpx

API_SCHEME = "https"
API_HOST = "api.twitch.tv"

TOKEN_PATH = "/kraken/oauth2/token"
CLIPS_PATH = "/helix/clips"


def api_url(path: str) -> httpx.URL:
    """Return the absolute URL for *path* on the Twitch API host."""
    return httpx.URL(scheme=API_SCHEME, host=API_HOST, path=path)


def build_request(
    http: Union[httpx.Client, httpx.AsyncClient],
    method: str,
    path: str,
    *,
    params: Optional[dict[str, Any]] = None,
    data: Optional[dict[str, Any]] = None,
    bearer: Optional[str] = None,
    client_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> httpx.Request:
    """Build an :class:`httpx.Request` for the Twitch API.

    Args:
        http: The client whose defaults (timeouts, user agent) the request
            inherits.  Nothing is sent.
        method: HTTP method.
        path: URL path, e.g. ``/helix/clips``.
        params: Query parameters (URL-encoded).
        data: Form body (``application/x-www-form-urlencoded``).
        bearer: Access token for the ``Authorization`` header.
        client_id: Value of the ``Client-ID`` header.
        timeout: Per-request timeout overriding the client default.

    Returns:
        The prepared request.

    Raises:
        ValueError: If both *bearer* and *client_id* are given.
    """
    if bearer and client_id:
        raise ValueError("a request carries either a bearer token or a Client-ID, not both")

    headers: dict[str, str] = {"Accept": "application/json"}
    if bearer:
        headers["Authorization"] = f"Bearer {bearer}"
    elif client_id:
        headers["Client-ID"] = client_id

    kwargs: dict[str, Any] = {"params": params, "headers": headers}
    if data is not None:
        kwargs["data"] = data
    if timeout is not None:
        kwargs["timeout"] = timeout

    return http.build_request(method, api_url(path), **kwargs)


def request_timeout(configured: float, remaining: Optional[float]) -> float:
    """Combine the configured timeout with the time left on a deadline."""
    if remaining is None:
        return configured
    return min(configured, remaining)

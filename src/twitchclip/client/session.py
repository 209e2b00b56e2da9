"""Session state shared by the blocking and async clients.

:class:`Session` owns the credentials and the current token pair.  It
validates the credentials on construction, checks the per-operation
preconditions, and is the only place the token pair is written.

The token fields are not guarded by a lock: concurrent refreshes on the same
session are last-writer-wins.  Callers that refresh from several threads or
tasks must serialise those calls themselves.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from twitchclip.context import Context
from twitchclip.exceptions import (
    InvalidUsageError,
    MissingClientIdError,
    MissingCredentialsError,
    UnauthenticatedError,
)
from twitchclip.models import AuthResponse

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ("clips:edit",)


class Session:
    """Credentials and token state of one client instance.

    Args:
        client_id: Twitch application client id.  Required.
        client_secret: Twitch application client secret.  Required.
        access_token: Optional initial access token.
        refresh_token: Optional initial refresh token.
        scopes: Scopes requested on token refresh.

    Raises:
        MissingCredentialsError: If *client_id* or *client_secret* is empty.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        access_token: str = "",
        refresh_token: str = "",
        scopes: Iterable[str] = DEFAULT_SCOPES,
    ) -> None:
        if not client_id or not client_secret:
            raise MissingCredentialsError()
        self.client_id = client_id
        self.client_secret = client_secret
        self.access_token = access_token or ""
        self.refresh_token = refresh_token or ""
        self.scopes = list(scopes)
        self.auth: Optional[AuthResponse] = None

    # ------------------------------------------------------------------ #
    # Preconditions
    # ------------------------------------------------------------------ #

    def _bearer_token(self) -> str:
        """Token for the ``Authorization`` header, or raise if none is known."""
        if self.access_token:
            return self.access_token
        if self.auth is not None and self.auth.access_token:
            return self.auth.access_token
        raise UnauthenticatedError()

    def _require_client_id(self) -> str:
        if not self.client_id:
            raise MissingClientIdError()
        return self.client_id

    @staticmethod
    def _require_argument(value: str, name: str) -> str:
        if not value:
            raise InvalidUsageError(f"{name} must not be empty")
        return value

    @staticmethod
    def _context(ctx: Optional[Context]) -> Context:
        return ctx if ctx is not None else Context.background()

    # ------------------------------------------------------------------ #
    # Token state
    # ------------------------------------------------------------------ #

    def _refresh_form(self) -> dict[str, str]:
        """Form body of the refresh-token grant."""
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "grant_type": "refresh_token",
        }
        if self.scopes:
            form["scope"] = " ".join(self.scopes)
        return form

    def _store_auth(self, auth: AuthResponse) -> None:
        """Replace the token pair with the one from *auth*."""
        self.access_token, self.refresh_token, self.auth = (
            auth.access_token,
            auth.refresh_token,
            auth,
        )
        logger.info("Token pair rotated (scopes: %s)", ", ".join(auth.scope) or "none")

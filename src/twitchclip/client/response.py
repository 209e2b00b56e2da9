"""Response classification and body decoding.

After an HTTP call completes, the body is read into memory once and handed,
together with the status code, to :func:`classify_response`.  That function
is pure: it decides success or failure and, on failure, turns the body into
an :class:`~twitchclip.exceptions.ApiError`.  The ``decode_*`` helpers then
map a success body onto the matching model from :mod:`twitchclip.models`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Collection, Optional

from pydantic import ValidationError

from twitchclip.exceptions import ApiError, DecodeError
from twitchclip.models import (
    AuthResponse,
    Clip,
    ClipCreateResponse,
    ClipRecord,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

STATUS_OK = frozenset({200})


def is_success(status_code: int, expected: Optional[Collection[int]] = None) -> bool:
    """Return whether *status_code* counts as success.

    Args:
        status_code: HTTP status code.
        expected: Accepted codes.  ``None`` accepts the whole 2xx class.
    """
    if expected is None:
        return 200 <= status_code < 300
    return status_code in expected


def classify_response(
    status_code: int,
    body: bytes,
    reason: str = "",
    expected: Optional[Collection[int]] = None,
) -> bytes:
    """Return *body* on success, raise :class:`ApiError` otherwise.

    On failure the body is decoded as a Twitch error document
    (``{"error", "message", "status"}``).  When that fails, or the document
    carries neither a label nor a message, the error is synthesised from the
    status line instead.

    Args:
        status_code: HTTP status code of the response.
        body: Raw response body.
        reason: Reason phrase of the status line (e.g. ``"Unauthorized"``).
        expected: Accepted status codes; ``None`` accepts any 2xx.

    Returns:
        The unchanged body.

    Raises:
        ApiError: If the status is not a success status.
    """
    if is_success(status_code, expected):
        return body
    raise error_from_body(status_code, body, reason)


def error_from_body(status_code: int, body: bytes, reason: str = "") -> ApiError:
    """Build an :class:`ApiError` from an error response body."""
    try:
        err = ErrorResponse.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("Undecodable error body for HTTP %d: %s", status_code, exc.errors()[0]["msg"])
        return _synthesize(status_code, reason)

    if not err.error and not err.message:
        return _synthesize(status_code, reason)
    return ApiError(
        label=err.error,
        message=err.message or reason,
        status=err.status or status_code,
    )


def _synthesize(status_code: int, reason: str) -> ApiError:
    status_text = f"{status_code} {reason}".strip()
    return ApiError(label=reason, message=status_text, status=status_code)


# ------------------------------------------------------------------ #
# Body decoders
# ------------------------------------------------------------------ #


def decode_auth(body: bytes) -> AuthResponse:
    """Decode a refresh-token grant response.

    Raises:
        DecodeError: If the body is not a valid token document.
    """
    try:
        return AuthResponse.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(body, exc) from exc


def decode_created_clips(body: bytes) -> ClipCreateResponse:
    """Decode a clip-creation response.

    Raises:
        DecodeError: If the body does not match ``{"data": [{"id", "edit_url"}]}``.
    """
    try:
        return ClipCreateResponse.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(body, exc) from exc


def decode_clip(body: bytes) -> Clip:
    """Decode a clip lookup response.

    When the body does not validate as a whole, the raised
    :class:`DecodeError` carries in ``partial`` every object record of
    ``data``.  A field that fails validation falls back to its default and
    the record's other fields are kept.

    Raises:
        DecodeError: If the body is not a valid clip list.
    """
    try:
        return Clip.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(body, exc, partial=salvage_clip(body)) from exc


def salvage_clip(body: bytes) -> Clip:
    """Best-effort :class:`Clip` from a body that failed strict decoding."""
    try:
        payload = json.loads(body)
    except ValueError:
        return Clip()

    items = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return Clip()

    records = [salvage_record(item) for item in items if isinstance(item, dict)]
    return Clip(data=records)


def salvage_record(item: dict[str, Any]) -> ClipRecord:
    """Validate *item*, resetting only the fields that fail to their defaults."""
    try:
        return ClipRecord.model_validate(item)
    except ValidationError as exc:
        bad = {err["loc"][0] for err in exc.errors() if err["loc"]}
    logger.debug("Dropping undecodable clip fields: %s", ", ".join(sorted(map(str, bad))))
    return ClipRecord.model_validate({k: v for k, v in item.items() if k not in bad})

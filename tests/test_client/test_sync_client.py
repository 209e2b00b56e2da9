"""Tests for the blocking Twitch client."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from twitchclip.client.sync_client import TwitchClient
from twitchclip.context import Context
from twitchclip.exceptions import (
    ApiError,
    DeadlineExceededError,
    DecodeError,
    EmptyResultError,
    InvalidUsageError,
    MissingClientIdError,
    MissingCredentialsError,
    RequestCancelledError,
    TransportError,
    UnauthenticatedError,
)
from twitchclip.models import AuthResponse, ClientSettings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client(transport: httpx.BaseTransport, **kwargs: Any) -> TwitchClient:
    kwargs.setdefault("access_token", "")
    kwargs.setdefault("refresh_token", "old-refresh")
    return TwitchClient("my-client-id", "my-secret", transport=transport, **kwargs)


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode())


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    @pytest.mark.parametrize(
        "client_id,client_secret",
        [("", "secret"), ("id", ""), ("", "")],
    )
    def test_missing_credentials(self, client_id: str, client_secret: str) -> None:
        with pytest.raises(MissingCredentialsError):
            TwitchClient(client_id, client_secret, "access", "refresh")

    def test_initial_tokens_are_stored(self) -> None:
        client = TwitchClient("id", "secret", "access", "refresh")
        assert client.client_id == "id"
        assert client.client_secret == "secret"
        assert client.access_token == "access"
        assert client.refresh_token == "refresh"
        assert client.auth is None
        client.close()

    def test_tokens_default_to_empty(self) -> None:
        with TwitchClient("id", "secret") as client:
            assert client.access_token == ""
            assert client.refresh_token == ""

    def test_context_manager_closes_transport(self) -> None:
        with TwitchClient("id", "secret") as client:
            inner = client._client
            assert not inner.is_closed
        assert inner.is_closed

    def test_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TWITCH_CLIENT_ID", "env-id")
        monkeypatch.setenv("TWITCH_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("TWITCH_REFRESH_TOKEN", "env-refresh")
        monkeypatch.delenv("TWITCH_ACCESS_TOKEN", raising=False)

        settings = ClientSettings(scopes=["clips:edit", "user:read:email"])
        with TwitchClient.from_settings(settings) as client:
            assert client.client_id == "env-id"
            assert client.client_secret == "env-secret"
            assert client.refresh_token == "env-refresh"
            assert client.access_token == ""
            assert client.scopes == ["clips:edit", "user:read:email"]


# ---------------------------------------------------------------------------
# refresh_auth_token
# ---------------------------------------------------------------------------


class TestRefreshAuthToken:
    def test_success_updates_session(self, mock_api) -> None:
        transport = mock_api(
            status=200,
            json={"access_token": "abc", "refresh_token": "def", "scope": ["clips:edit"]},
        )
        with _make_client(transport) as client:
            auth = client.refresh_auth_token()

            assert auth == AuthResponse(access_token="abc", refresh_token="def", scope=["clips:edit"])
            assert client.access_token == "abc"
            assert client.refresh_token == "def"
            assert client.auth is auth

    def test_request_shape(self, mock_api) -> None:
        transport = mock_api(status=200, json={"access_token": "a", "refresh_token": "r"})
        with _make_client(transport) as client:
            client.refresh_auth_token()

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.scheme == "https"
        assert request.url.host == "api.twitch.tv"
        assert request.url.path == "/kraken/oauth2/token"
        assert "authorization" not in request.headers
        assert "client-id" not in request.headers
        assert _form(request) == {
            "client_id": ["my-client-id"],
            "client_secret": ["my-secret"],
            "refresh_token": ["old-refresh"],
            "grant_type": ["refresh_token"],
            "scope": ["clips:edit"],
        }

    def test_scope_omitted_when_no_scopes(self, mock_api) -> None:
        transport = mock_api(status=200, json={"access_token": "a", "refresh_token": "r"})
        with _make_client(transport, scopes=()) as client:
            client.refresh_auth_token()
        assert "scope" not in _form(transport.requests[0])

    def test_second_refresh_uses_rotated_token(self, mock_api) -> None:
        tokens = iter([("a1", "r1"), ("a2", "r2")])

        def handler(request: httpx.Request) -> httpx.Response:
            access, refresh = next(tokens)
            return httpx.Response(200, json={"access_token": access, "refresh_token": refresh})

        transport = mock_api(handler)
        with _make_client(transport) as client:
            client.refresh_auth_token()
            client.refresh_auth_token()
            assert (client.access_token, client.refresh_token) == ("a2", "r2")

        assert _form(transport.requests[1])["refresh_token"] == ["r1"]

    @pytest.mark.parametrize("status", [202, 400, 401, 500])
    def test_non_200_leaves_session_unchanged(self, mock_api, status: int) -> None:
        transport = mock_api(
            status=status,
            json={"error": "Bad Request", "message": "Invalid refresh token", "status": status},
        )
        with _make_client(transport, access_token="keep-a") as client:
            with pytest.raises(ApiError) as exc_info:
                client.refresh_auth_token()

            assert exc_info.value.status == status
            assert client.access_token == "keep-a"
            assert client.refresh_token == "old-refresh"
            assert client.auth is None

    def test_malformed_body_raises_decode_error(self, mock_api) -> None:
        transport = mock_api(status=200, content=b"not json")
        with _make_client(transport, access_token="keep-a") as client:
            with pytest.raises(DecodeError) as exc_info:
                client.refresh_auth_token()

            assert exc_info.value.raw_body == b"not json"
            assert exc_info.value.cause is not None
            assert client.access_token == "keep-a"
            assert client.refresh_token == "old-refresh"

    def test_body_missing_refresh_token_is_decode_error(self, mock_api) -> None:
        transport = mock_api(status=200, json={"access_token": "only-access"})
        with _make_client(transport, access_token="keep-a") as client:
            with pytest.raises(DecodeError):
                client.refresh_auth_token()
            assert client.access_token == "keep-a"

    def test_connection_error_raises_transport_error(self, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _make_client(mock_api(handler)) as client:
            with pytest.raises(TransportError):
                client.refresh_auth_token()


# ---------------------------------------------------------------------------
# create_clip
# ---------------------------------------------------------------------------


class TestCreateClip:
    def test_returns_first_id(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X", "edit_url": "Y"}]})
        with _make_client(transport, access_token="tok") as client:
            assert client.create_clip("44445592") == "X"

    def test_accepts_200(self, mock_api) -> None:
        transport = mock_api(status=200, json={"data": [{"id": "X", "edit_url": "Y"}]})
        with _make_client(transport, access_token="tok") as client:
            assert client.create_clip("44445592") == "X"

    def test_request_shape(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X", "edit_url": "Y"}]})
        with _make_client(transport, access_token="tok") as client:
            client.create_clip("44445592")

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.host == "api.twitch.tv"
        assert request.url.path == "/helix/clips"
        assert request.url.params["broadcaster_id"] == "44445592"
        assert request.headers["authorization"] == "Bearer tok"
        assert "client-id" not in request.headers

    def test_create_clip_info_returns_edit_url(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X", "edit_url": "Y"}]})
        with _make_client(transport, access_token="tok") as client:
            created = client.create_clip_info("44445592")
        assert created.id == "X"
        assert created.edit_url == "Y"

    def test_empty_data_raises_empty_result(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": []})
        with _make_client(transport, access_token="tok") as client:
            with pytest.raises(EmptyResultError):
                client.create_clip("44445592")

    def test_unauthenticated_sends_nothing(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
        with _make_client(transport, access_token="") as client:
            with pytest.raises(UnauthenticatedError):
                client.create_clip("44445592")
        assert transport.requests == []

    def test_uses_token_from_refresh(self, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/kraken/oauth2/token":
                return httpx.Response(200, json={"access_token": "fresh", "refresh_token": "r"})
            return httpx.Response(202, json={"data": [{"id": "X", "edit_url": "Y"}]})

        transport = mock_api(handler)
        with _make_client(transport) as client:
            client.refresh_auth_token()
            assert client.create_clip("44445592") == "X"
        assert transport.requests[1].headers["authorization"] == "Bearer fresh"

    def test_falls_back_to_stored_auth(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
        with _make_client(transport) as client:
            client.auth = AuthResponse(access_token="from-auth", refresh_token="r")
            client.create_clip("44445592")
        assert transport.requests[0].headers["authorization"] == "Bearer from-auth"

    def test_empty_broadcaster_id(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
        with _make_client(transport, access_token="tok") as client:
            with pytest.raises(InvalidUsageError):
                client.create_clip("")
        assert transport.requests == []

    def test_api_error(self, mock_api) -> None:
        transport = mock_api(
            status=401,
            json={"error": "Unauthorized", "message": "Missing scope: clips:edit", "status": 401},
        )
        with _make_client(transport, access_token="tok") as client:
            with pytest.raises(ApiError) as exc_info:
                client.create_clip("44445592")
        assert exc_info.value.is_unauthorized
        assert exc_info.value.message == "Missing scope: clips:edit"

    def test_malformed_body(self, mock_api) -> None:
        transport = mock_api(status=202, content=b"<html>oops</html>")
        with _make_client(transport, access_token="tok") as client:
            with pytest.raises(DecodeError) as exc_info:
                client.create_clip("44445592")
        assert exc_info.value.raw_body == b"<html>oops</html>"

    def test_create_does_not_touch_tokens(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
        with _make_client(transport, access_token="tok") as client:
            client.create_clip("44445592")
            assert client.access_token == "tok"
            assert client.refresh_token == "old-refresh"
            assert client.auth is None


# ---------------------------------------------------------------------------
# get_clip
# ---------------------------------------------------------------------------


class TestGetClip:
    def test_returns_full_clip(self, mock_api, clip_record: dict[str, Any]) -> None:
        second = dict(clip_record, id="Other", view_count=3)
        transport = mock_api(status=200, json={"data": [clip_record, second]})
        with _make_client(transport) as client:
            clip = client.get_clip("AwkwardHelplessSalamanderSwiftRage")

        assert len(clip.data) == 2
        assert clip.first is not None
        assert clip.first.model_dump() == clip_record
        assert clip.first.view_count == 1500
        assert clip.data[1].id == "Other"

    def test_request_shape(self, mock_api, clip_record: dict[str, Any]) -> None:
        transport = mock_api(status=200, json={"data": [clip_record]})
        with _make_client(transport, access_token="tok") as client:
            client.get_clip("AwkwardHelplessSalamanderSwiftRage")

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/helix/clips"
        assert request.url.params["id"] == "AwkwardHelplessSalamanderSwiftRage"
        assert request.headers["client-id"] == "my-client-id"
        assert "authorization" not in request.headers

    def test_unauthorized(self, mock_api) -> None:
        transport = mock_api(
            status=401,
            json={"error": "Unauthorized", "message": "Token invalid", "status": 401},
        )
        with _make_client(transport) as client:
            with pytest.raises(ApiError) as exc_info:
                client.get_clip("X")

        assert exc_info.value.label == "Unauthorized"
        assert exc_info.value.message == "Token invalid"
        assert exc_info.value.status == 401

    def test_202_is_not_success(self, mock_api, clip_record: dict[str, Any]) -> None:
        transport = mock_api(status=202, json={"data": [clip_record]})
        with _make_client(transport) as client:
            with pytest.raises(ApiError) as exc_info:
                client.get_clip("X")
        assert exc_info.value.status == 202

    def test_missing_client_id_sends_nothing(self, mock_api) -> None:
        transport = mock_api(status=200, json={"data": []})
        with _make_client(transport) as client:
            client.client_id = ""
            with pytest.raises(MissingClientIdError):
                client.get_clip("X")
        assert transport.requests == []

    def test_empty_clip_id(self, mock_api) -> None:
        transport = mock_api(status=200, json={"data": []})
        with _make_client(transport) as client:
            with pytest.raises(InvalidUsageError):
                client.get_clip("")
        assert transport.requests == []

    def test_decode_error_keeps_partial(self, mock_api, clip_record: dict[str, Any]) -> None:
        broken = dict(clip_record, id="Broken", view_count="many")
        body = json.dumps({"data": [clip_record, broken]}).encode()
        transport = mock_api(status=200, content=body)
        with _make_client(transport) as client:
            with pytest.raises(DecodeError) as exc_info:
                client.get_clip("X")

        partial = exc_info.value.partial
        assert [record.id for record in partial.data] == [
            "AwkwardHelplessSalamanderSwiftRage",
            "Broken",
        ]
        kept = partial.data[1]
        assert kept.view_count == 0
        assert kept.title == clip_record["title"]
        assert kept.url == clip_record["url"]
        assert exc_info.value.raw_body == body

    def test_decode_error_on_non_json(self, mock_api) -> None:
        transport = mock_api(status=200, content=b"garbage")
        with _make_client(transport) as client:
            with pytest.raises(DecodeError) as exc_info:
                client.get_clip("X")
        assert exc_info.value.partial.data == []


# ---------------------------------------------------------------------------
# Cancellation and deadlines
# ---------------------------------------------------------------------------


class TestContext:
    def test_cancelled_context_sends_nothing(self, mock_api) -> None:
        transport = mock_api(status=200, json={"access_token": "a", "refresh_token": "r"})
        ctx = Context.background()
        ctx.cancel()
        with _make_client(transport) as client:
            with pytest.raises(RequestCancelledError):
                client.refresh_auth_token(ctx)
            assert client.refresh_token == "old-refresh"
        assert transport.requests == []

    def test_expired_deadline_sends_nothing(self, mock_api) -> None:
        transport = mock_api(status=202, json={"data": [{"id": "X"}]})
        with _make_client(transport, access_token="tok") as client:
            with pytest.raises(DeadlineExceededError):
                client.create_clip("44445592", Context.with_deadline(0.0))
        assert transport.requests == []

    def test_cancel_during_request_discards_response(self, mock_api) -> None:
        ctx = Context.background()

        def handler(request: httpx.Request) -> httpx.Response:
            ctx.cancel()
            return httpx.Response(200, json={"access_token": "a", "refresh_token": "r"})

        with _make_client(mock_api(handler)) as client:
            with pytest.raises(RequestCancelledError):
                client.refresh_auth_token(ctx)
            assert client.access_token == ""
            assert client.refresh_token == "old-refresh"

    def test_deadline_caps_request_timeout(self, mock_api) -> None:
        seen: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(202, json={"data": [{"id": "X"}]})

        with _make_client(mock_api(handler), access_token="tok", timeout=30.0) as client:
            client.create_clip("44445592", Context.with_timeout(2.0))
            client.create_clip("44445592")

        assert seen[0]["read"] <= 2.0
        assert seen[1]["read"] == 30.0

    def test_timeout_past_deadline_is_deadline_exceeded(self, mock_api) -> None:
        ctx = Context.with_timeout(60.0)

        def handler(request: httpx.Request) -> httpx.Response:
            ctx._deadline = 0.0
            raise httpx.ReadTimeout("timed out", request=request)

        with _make_client(mock_api(handler), access_token="tok") as client:
            with pytest.raises(DeadlineExceededError):
                client.create_clip("44445592", ctx)

    def test_plain_timeout_is_transport_error(self, mock_api) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with _make_client(mock_api(handler), access_token="tok") as client:
            with pytest.raises(TransportError) as exc_info:
                client.create_clip("44445592")
        assert not isinstance(exc_info.value, DeadlineExceededError)

"""Tests for the Google OAuth client."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from google.auth.exceptions import RefreshError as GoogleRefreshError

from app.auth.oauth import (
    GOOGLE_AUTH_URL,
    GOOGLE_TOKEN_URL,
    build_authorization_url,
    exchange_code,
    fetch_identity,
    refresh_access_token,
)
from app.core.exceptions import IdentityFetchError, RefreshError, TokenExchangeError


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestBuildAuthorizationUrl:
    def test_offline_consent_with_state(self):
        url = build_authorization_url("client-id", "https://app.test/oauth2/callback", "xyz")

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == GOOGLE_AUTH_URL
        params = {k: v[0] for k, v in parse_qs(parts.query).items()}
        assert params == {
            "client_id": "client-id",
            "redirect_uri": "https://app.test/oauth2/callback",
            "response_type": "code",
            "scope": "https://www.googleapis.com/auth/calendar.events",
            "access_type": "offline",
            "include_granted_scopes": "true",
            "prompt": "consent",
            "state": "xyz",
        }


@pytest.mark.asyncio
class TestExchangeCode:
    async def test_posts_authorization_code_grant(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"access_token": "a", "expires_in": 3599, "refresh_token": "r", "token_type": "Bearer"},
            )

        async with mock_client(handler) as client:
            tokens = await exchange_code(client, "the-code", "cid", "secret", "https://app.test/cb")

        assert tokens.access_token == "a"
        assert tokens.refresh_token == "r"
        assert tokens.expires_in == 3599

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == GOOGLE_TOKEN_URL
        form = parse_qs(request.content.decode())
        assert form["grant_type"] == ["authorization_code"]
        assert form["code"] == ["the-code"]
        assert form["redirect_uri"] == ["https://app.test/cb"]

    async def test_refresh_token_may_be_absent(self):
        async with mock_client(lambda r: httpx.Response(200, json={"access_token": "a"})) as client:
            tokens = await exchange_code(client, "c", "cid", "secret", "uri")

        assert tokens.refresh_token is None
        assert tokens.expires_in is None

    async def test_non_2xx_raises(self):
        async with mock_client(lambda r: httpx.Response(400, json={"error": "invalid_grant"})) as client:
            with pytest.raises(TokenExchangeError) as excinfo:
                await exchange_code(client, "c", "cid", "secret", "uri")

        assert excinfo.value.status == 400
        assert excinfo.value.service == "oauth"

    @pytest.mark.parametrize(
        "response",
        [httpx.Response(200, text="<html>proxy</html>"), httpx.Response(200, json=["a"]), httpx.Response(200, json={})],
    )
    async def test_unusable_body_raises(self, response):
        async with mock_client(lambda r: response) as client:
            with pytest.raises(TokenExchangeError) as excinfo:
                await exchange_code(client, "c", "cid", "secret", "uri")

        assert excinfo.value.status == 200

    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(TokenExchangeError) as excinfo:
                await exchange_code(client, "c", "cid", "secret", "uri")

        assert excinfo.value.status is None


@pytest.mark.asyncio
class TestFetchIdentity:
    async def test_sends_bearer_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"email": "ada@example.com", "id": "123"})

        async with mock_client(handler) as client:
            identity = await fetch_identity(client, "access-1")

        assert identity.email == "ada@example.com"
        assert identity.id == "123"
        assert seen[0].headers["Authorization"] == "Bearer access-1"

    async def test_non_2xx_raises(self):
        async with mock_client(lambda r: httpx.Response(401)) as client:
            with pytest.raises(IdentityFetchError) as excinfo:
                await fetch_identity(client, "bad")

        assert excinfo.value.status == 401

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>proxy</html>"),
            httpx.Response(200, json=["a"]),
            httpx.Response(200, json={"id": "1"}),
            httpx.Response(200, json={"email": 7}),
        ],
    )
    async def test_unusable_body_raises(self, response):
        async with mock_client(lambda r: response) as client:
            with pytest.raises(IdentityFetchError):
                await fetch_identity(client, "access-1")


class TestRefreshAccessToken:
    def test_returns_new_token_and_lifetime(self):
        with patch("app.auth.oauth.Credentials") as credentials_cls:
            credentials = credentials_cls.return_value
            credentials.token = "fresh"
            credentials.expiry = datetime.now(UTC).replace(tzinfo=None) + timedelta(seconds=3600)

            tokens = refresh_access_token("refresh-1", "cid", "secret")

        assert tokens.access_token == "fresh"
        assert 3590 <= tokens.expires_in <= 3600
        kwargs = credentials_cls.call_args.kwargs
        assert kwargs["refresh_token"] == "refresh-1"
        assert kwargs["token_uri"] == GOOGLE_TOKEN_URL
        assert kwargs["client_id"] == "cid"
        credentials.refresh.assert_called_once()

    def test_missing_expiry_leaves_lifetime_unset(self):
        with patch("app.auth.oauth.Credentials") as credentials_cls:
            credentials = credentials_cls.return_value
            credentials.token = "fresh"
            credentials.expiry = None

            tokens = refresh_access_token("refresh-1", "cid", "secret")

        assert tokens.expires_in is None

    def test_google_failure_raises_refresh_error(self):
        with patch("app.auth.oauth.Credentials") as credentials_cls:
            credentials_cls.return_value.refresh.side_effect = GoogleRefreshError("invalid_grant")

            with pytest.raises(RefreshError) as excinfo:
                refresh_access_token("revoked", "cid", "secret")

        assert excinfo.value.status_code == 401

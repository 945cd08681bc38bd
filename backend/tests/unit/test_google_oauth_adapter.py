"""
Unit tests for the Google OAuth adapter.

HTTP calls go through httpx.MockTransport; nothing reaches Google.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from adapters.google import oauth_adapter as oauth_module
from adapters.google.oauth_adapter import (
    GoogleOAuthAdapter,
    GoogleOAuthConfigError,
    GoogleOAuthError,
)

REDIRECT_URI = "http://localhost:3000/api/auth/google/callback"


def _adapter(handler=None) -> GoogleOAuthAdapter:
    transport = httpx.MockTransport(handler) if handler else None
    return GoogleOAuthAdapter(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri=REDIRECT_URI,
        transport=transport,
    )


class TestAuthorizationUrl:
    def test_contains_offline_consent_params(self):
        url = _adapter().get_authorization_url(state="abc123")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == GoogleOAuthAdapter.OAUTH_AUTH_URL
        assert params["client_id"] == ["client-id"]
        assert params["redirect_uri"] == [REDIRECT_URI]
        assert params["response_type"] == ["code"]
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert params["state"] == ["abc123"]
        scopes = params["scope"][0].split(" ")
        assert "https://www.googleapis.com/auth/calendar.readonly" in scopes
        assert "https://www.googleapis.com/auth/userinfo.email" in scopes

    def test_state_omitted_when_not_given(self):
        params = parse_qs(urlparse(_adapter().get_authorization_url()).query)
        assert "state" not in params

    def test_missing_credentials_raise(self, monkeypatch):
        monkeypatch.setattr(oauth_module.settings, "google_client_id", None)
        monkeypatch.setattr(oauth_module.settings, "google_client_secret", None)
        adapter = GoogleOAuthAdapter(redirect_uri=REDIRECT_URI)

        assert adapter.is_configured is False
        with pytest.raises(GoogleOAuthConfigError):
            adapter.get_authorization_url(state="x")


class TestExchangeCode:
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = parse_qs(request.content.decode())
            return httpx.Response(
                200,
                json={
                    "access_token": "ya29.token",
                    "refresh_token": "1//refresh",
                    "expires_in": 3599,
                    "scope": "openid email",
                },
            )

        tokens = await _adapter(handler).exchange_code("auth-code")

        assert seen["url"] == GoogleOAuthAdapter.OAUTH_TOKEN_URL
        assert seen["body"]["code"] == ["auth-code"]
        assert seen["body"]["grant_type"] == ["authorization_code"]
        assert tokens.access_token == "ya29.token"
        assert tokens.refresh_token == "1//refresh"
        assert tokens.expires_at is not None
        assert tokens.scope == "openid email"

    async def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(GoogleOAuthError):
            await _adapter(handler).exchange_code("bad-code")

    async def test_missing_access_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token_type": "Bearer"})

        with pytest.raises(GoogleOAuthError):
            await _adapter(handler).exchange_code("auth-code")

    async def test_without_expiry(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": "ya29.token"})

        tokens = await _adapter(handler).exchange_code("auth-code")

        assert tokens.refresh_token is None
        assert tokens.expires_at is None


class TestGetUserInfo:
    async def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer ya29.token"
            return httpx.Response(
                200,
                json={"id": 1234567890, "email": "owner@acme.com", "name": "Owner"},
            )

        info = await _adapter(handler).get_user_info("ya29.token")

        assert info.id == "1234567890"
        assert info.email == "owner@acme.com"
        assert info.name == "Owner"

    async def test_unauthorized(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_token"})

        with pytest.raises(GoogleOAuthError):
            await _adapter(handler).get_user_info("expired")

    async def test_missing_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"email": "owner@acme.com"})

        with pytest.raises(GoogleOAuthError):
            await _adapter(handler).get_user_info("ya29.token")

    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GoogleOAuthError):
            await _adapter(handler).get_user_info("ya29.token")

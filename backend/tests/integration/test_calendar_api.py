"""Integration tests for Google calendar connections and the OAuth callback."""

import base64
import json
import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.google import GoogleOAuthAdapter, get_google_oauth_adapter
import api.oauth_helpers as oauth_helpers
from api.oauth_helpers import OAuthState, decode_state, encode_state, store_oauth_state
from core.security.encryption import TokenEncryption
from infrastructure.config.settings import settings
from infrastructure.database.models import CalendarConnection, User

pytestmark = pytest.mark.asyncio

CALLBACK = "/api/auth/google/callback"


class FakeGoogleAdapter(GoogleOAuthAdapter):
    """Adapter whose HTTP calls are answered by a MockTransport."""

    def __init__(
        self, token_status=200, userinfo=None, calendar_name="Work", refresh_token="1//refresh"
    ):
        self.calendar_name = calendar_name
        userinfo = userinfo if userinfo is not None else {
            "id": "google-123",
            "email": "owner@acme.com",
            "name": "Owner Name",
        }

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/token":
                if token_status != 200:
                    return httpx.Response(token_status, json={"error": "invalid_grant"})
                token = {"access_token": "ya29.access", "expires_in": 3600}
                if refresh_token:
                    token["refresh_token"] = refresh_token
                return httpx.Response(200, json=token)
            return httpx.Response(200, json=userinfo)

        super().__init__(
            client_id="client-id",
            client_secret="client-secret",
            redirect_uri="http://localhost:3000/api/auth/google/callback",
            transport=httpx.MockTransport(handler),
        )

    async def get_primary_calendar_name(self, tokens):
        return self.calendar_name


@pytest.fixture(autouse=True)
def memory_oauth_states(monkeypatch):
    """Keep issued OAuth states in process memory."""
    monkeypatch.setattr(oauth_helpers.settings, "redis_url", None)
    monkeypatch.setattr(oauth_helpers, "_oauth_states", {})


@pytest.fixture
def use_adapter(async_client: AsyncClient):
    """Install a fake Google adapter for the request."""
    from main import app

    def _install(adapter: GoogleOAuthAdapter) -> None:
        app.dependency_overrides[get_google_oauth_adapter] = lambda: adapter

    return _install


async def _state_for(user: User, **fields) -> str:
    """A state issued by the server to ``user``."""
    state = OAuthState.new(user_id=user.id, **fields)
    await store_oauth_state(state.nonce, user.id)
    return encode_state(state)


def _redirect_params(response: httpx.Response) -> dict:
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(f"{settings.app_url.rstrip('/')}/settings?")
    return {k: v[0] for k, v in parse_qs(urlparse(location).query).items()}


class TestStartConnection:
    async def test_returns_auth_url_with_state(
        self, async_client: AsyncClient, auth_headers: dict, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())

        response = await async_client.post(
            "/api/settings/calendar-connections",
            json={"title": "Team calendar", "returnUrl": "/settings"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        auth_url = response.json()["data"]["authUrl"]
        params = parse_qs(urlparse(auth_url).query)
        assert params["access_type"] == ["offline"]

        state = decode_state(params["state"][0])
        assert state.connect_first is True
        assert state.user_id == test_user.id
        assert state.title == "Team calendar"
        assert state.return_url == "/settings"

    async def test_without_body(
        self, async_client: AsyncClient, auth_headers: dict, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())

        response = await async_client.post(
            "/api/settings/calendar-connections", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["authUrl"].startswith(GoogleOAuthAdapter.OAUTH_AUTH_URL)

    async def test_not_configured(
        self, async_client: AsyncClient, auth_headers: dict, use_adapter
    ):
        adapter = FakeGoogleAdapter()
        adapter.client_id = None
        use_adapter(adapter)

        response = await async_client.post(
            "/api/settings/calendar-connections", headers=auth_headers
        )

        assert response.status_code == 503

    async def test_issued_state_completes_callback(
        self, async_client: AsyncClient, auth_headers: dict, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())

        response = await async_client.post(
            "/api/settings/calendar-connections", headers=auth_headers
        )
        auth_url = response.json()["data"]["authUrl"]
        state = parse_qs(urlparse(auth_url).query)["state"][0]

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(response)["success"] == "calendar_connected"


class TestCallbackErrors:
    async def test_denied(self, async_client: AsyncClient, use_adapter):
        use_adapter(FakeGoogleAdapter())
        response = await async_client.get(CALLBACK, params={"error": "access_denied"})
        assert _redirect_params(response) == {"error": "google_auth_denied"}

    async def test_missing_params(self, async_client: AsyncClient, use_adapter):
        use_adapter(FakeGoogleAdapter())
        response = await async_client.get(CALLBACK, params={"code": "abc"})
        assert _redirect_params(response) == {"error": "missing_auth_params"}

    async def test_invalid_state(self, async_client: AsyncClient, use_adapter):
        use_adapter(FakeGoogleAdapter())
        response = await async_client.get(CALLBACK, params={"code": "abc", "state": "garbage!!"})
        assert _redirect_params(response) == {"error": "invalid_state"}

    async def test_expired_state(self, async_client: AsyncClient, test_user: User, use_adapter):
        use_adapter(FakeGoogleAdapter())
        old = int((time.time() - 3600) * 1000)
        state = encode_state(OAuthState(user_id=test_user.id, timestamp=old))

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(response) == {"error": "invalid_state"}

    async def test_state_without_user(self, async_client: AsyncClient, use_adapter):
        use_adapter(FakeGoogleAdapter())
        state = encode_state(OAuthState.new(connect_first=True))

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(response) == {"error": "invalid_state"}

    async def test_token_exchange_failed(
        self, async_client: AsyncClient, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter(token_status=400))

        response = await async_client.get(
            CALLBACK, params={"code": "bad", "state": await _state_for(test_user)}
        )

        assert _redirect_params(response) == {"error": "token_exchange_failed"}

    async def test_user_info_failed(
        self, async_client: AsyncClient, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter(userinfo={"email": "owner@acme.com"}))

        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(test_user)}
        )

        assert _redirect_params(response) == {"error": "user_info_failed"}

    async def test_no_email(self, async_client: AsyncClient, test_user: User, use_adapter):
        use_adapter(FakeGoogleAdapter(userinfo={"id": "google-123"}))

        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(test_user)}
        )

        assert _redirect_params(response) == {"error": "no_user_email"}

    async def test_state_not_issued_by_server(
        self, async_client: AsyncClient, test_user: User, db_session: AsyncSession, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        forged = encode_state(OAuthState.new(user_id=test_user.id, connect_first=True))

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": forged})

        assert _redirect_params(response) == {"error": "invalid_state"}
        count = await db_session.scalar(select(func.count()).select_from(CalendarConnection))
        assert count == 0

    async def test_state_without_timestamp(
        self, async_client: AsyncClient, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        raw = json.dumps({"userId": test_user.id}).encode()
        state = base64.b64encode(raw).decode()

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(response) == {"error": "invalid_state"}

    async def test_state_issued_to_another_user(
        self, async_client: AsyncClient, test_user: User, editor_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        state = OAuthState.new(user_id=test_user.id)
        await store_oauth_state(state.nonce, editor_user.id)

        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": encode_state(state)}
        )

        assert _redirect_params(response) == {"error": "invalid_state"}

    async def test_state_cannot_be_replayed(
        self, async_client: AsyncClient, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        state = await _state_for(test_user)

        first = await async_client.get(CALLBACK, params={"code": "abc", "state": state})
        second = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(first) == {"success": "calendar_connected"}
        assert _redirect_params(second) == {"error": "invalid_state"}

    async def test_database_failure(
        self,
        async_client: AsyncClient,
        test_user: User,
        db_session: AsyncSession,
        use_adapter,
        monkeypatch,
    ):
        use_adapter(FakeGoogleAdapter())
        state = await _state_for(test_user)

        async def failing_commit():
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        response = await async_client.get(CALLBACK, params={"code": "abc", "state": state})

        assert _redirect_params(response) == {"error": "database_connection_failed"}
        count = await db_session.scalar(select(func.count()).select_from(CalendarConnection))
        assert count == 0


class TestCallbackSuccess:
    async def test_connect_first(
        self,
        async_client: AsyncClient,
        test_user: User,
        db_session: AsyncSession,
        use_adapter,
    ):
        use_adapter(FakeGoogleAdapter(calendar_name="Primary Work"))

        response = await async_client.get(
            CALLBACK,
            params={"code": "abc", "state": await _state_for(test_user, connect_first=True)},
        )

        params = _redirect_params(response)
        assert params["success"] == "calendar_connected"
        assert params["email"] == "owner@acme.com"
        assert params["calendarName"] == "Primary Work"

        connection = (
            await db_session.execute(
                select(CalendarConnection).where(CalendarConnection.id == params["connectionId"])
            )
        ).scalar_one()
        assert connection.user_id == test_user.id
        assert connection.title == "Primary Work"
        assert connection.is_active is True
        # Tokens are stored encrypted
        assert connection.access_token != "ya29.access"
        cipher = TokenEncryption(settings.encryption_key)
        assert cipher.decrypt(connection.access_token) == "ya29.access"
        assert cipher.decrypt(connection.refresh_token) == "1//refresh"

    async def test_title_from_state_and_upsert(
        self,
        async_client: AsyncClient,
        test_user: User,
        db_session: AsyncSession,
        use_adapter,
    ):
        use_adapter(FakeGoogleAdapter())

        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(test_user, title="Board")}
        )
        assert _redirect_params(response) == {"success": "calendar_connected"}

        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(test_user, title="Renamed")}
        )
        assert _redirect_params(response) == {"success": "calendar_connected"}

        connections = (
            await db_session.execute(
                select(CalendarConnection).where(CalendarConnection.user_id == test_user.id)
            )
        ).scalars().all()
        assert len(connections) == 1
        assert connections[0].title == "Renamed"

    async def test_calendar_name_falls_back_to_account_name(
        self, async_client: AsyncClient, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter(calendar_name=None))

        response = await async_client.get(
            CALLBACK,
            params={"code": "abc", "state": await _state_for(test_user, connect_first=True)},
        )

        assert _redirect_params(response)["calendarName"] == "Owner Name"

    async def test_reconnect_without_refresh_token_keeps_stored_one(
        self,
        async_client: AsyncClient,
        test_user: User,
        db_session: AsyncSession,
        use_adapter,
    ):
        use_adapter(FakeGoogleAdapter())
        await async_client.get(CALLBACK, params={"code": "abc", "state": await _state_for(test_user)})

        use_adapter(FakeGoogleAdapter(refresh_token=None))
        response = await async_client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(test_user)}
        )
        assert _redirect_params(response) == {"success": "calendar_connected"}

        connection = (
            await db_session.execute(
                select(CalendarConnection).where(CalendarConnection.user_id == test_user.id)
            )
        ).scalar_one()
        await db_session.refresh(connection)
        cipher = TokenEncryption(settings.encryption_key)
        assert cipher.decrypt(connection.refresh_token) == "1//refresh"


class TestManageConnections:
    async def _connect(self, client: AsyncClient, user: User) -> str:
        response = await client.get(
            CALLBACK, params={"code": "abc", "state": await _state_for(user, connect_first=True)}
        )
        return _redirect_params(response)["connectionId"]

    async def test_list_hides_tokens(
        self, async_client: AsyncClient, auth_headers: dict, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        await self._connect(async_client, test_user)

        response = await async_client.get(
            "/api/settings/calendar-connections", headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        connection = body["data"][0]
        assert connection["email"] == "owner@acme.com"
        assert "accessToken" not in connection
        assert "refreshToken" not in connection

    async def test_update_and_delete(
        self, async_client: AsyncClient, auth_headers: dict, test_user: User, use_adapter
    ):
        use_adapter(FakeGoogleAdapter())
        connection_id = await self._connect(async_client, test_user)

        response = await async_client.put(
            f"/api/settings/calendar-connections/{connection_id}",
            json={"title": "Renamed", "isActive": False},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed"
        assert response.json()["data"]["isActive"] is False

        response = await async_client.delete(
            f"/api/settings/calendar-connections/{connection_id}", headers=auth_headers
        )
        assert response.json() == {"success": True, "message": "Calendar connection removed"}

    async def test_other_users_connection_hidden(
        self,
        async_client: AsyncClient,
        test_user: User,
        editor_headers: dict,
        use_adapter,
    ):
        use_adapter(FakeGoogleAdapter())
        connection_id = await self._connect(async_client, test_user)

        response = await async_client.delete(
            f"/api/settings/calendar-connections/{connection_id}", headers=editor_headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Calendar connection not found"

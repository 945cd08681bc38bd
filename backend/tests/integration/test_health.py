"""Integration tests for the health endpoints."""

import pytest
from httpx import AsyncClient

from adapters.supabase import SupabaseConfigError, SupabaseStatus, get_supabase_adapter

pytestmark = pytest.mark.asyncio


class FakeSupabase:
    def __init__(self, status=None, error=None):
        self._status = status
        self._error = error

    def check_connection(self, table: str = "analysts") -> SupabaseStatus:
        if self._error:
            raise self._error
        return self._status


@pytest.fixture
def use_supabase(async_client: AsyncClient):
    from main import app

    def _install(fake: FakeSupabase) -> None:
        app.dependency_overrides[get_supabase_adapter] = lambda: fake

    return _install


class TestHealth:
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    async def test_live(self, async_client: AsyncClient):
        response = await async_client.get("/api/health/live")
        assert response.json() == {"alive": True}

    async def test_db(self, async_client: AsyncClient):
        response = await async_client.get("/api/health/db")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_response_headers(self, async_client: AsyncClient):
        response = await async_client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Request-ID"]


class TestSupabaseHealth:
    async def test_connected(self, async_client: AsyncClient, use_supabase):
        use_supabase(FakeSupabase(status=SupabaseStatus(reachable=True, table="analysts")))

        response = await async_client.get("/api/health/supabase")

        assert response.status_code == 200
        assert response.json()["supabase"] == "connected"

    async def test_unreachable(self, async_client: AsyncClient, use_supabase):
        use_supabase(
            FakeSupabase(
                status=SupabaseStatus(reachable=False, table="analysts", error="connection refused")
            )
        )

        response = await async_client.get("/api/health/supabase")

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Supabase unavailable"}

    async def test_not_configured(self, async_client: AsyncClient, use_supabase):
        use_supabase(FakeSupabase(error=SupabaseConfigError("Supabase URL and key are required")))

        response = await async_client.get("/api/health/supabase")

        assert response.status_code == 200
        assert response.json()["status"] == "not_configured"


class TestUnknownRoute:
    async def test_not_found_envelope(self, async_client: AsyncClient):
        response = await async_client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["success"] is False

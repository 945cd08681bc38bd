"""Integration tests for the newsletter endpoints."""

import pytest
from httpx import AsyncClient

from infrastructure.database.models import User

pytestmark = pytest.mark.asyncio


async def _create(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {"title": "Monthly digest", "subject": "What's new"}
    payload.update(fields)
    response = await client.post("/api/newsletters", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestNewsletterCrud:
    async def test_create(self, async_client: AsyncClient, auth_headers: dict, test_user: User):
        data = await _create(async_client, auth_headers, htmlContent="<p>Hello</p>")

        assert data["status"] == "DRAFT"
        assert data["htmlContent"] == "<p>Hello</p>"
        assert data["createdBy"] == test_user.id
        assert data["sentAt"] is None
        assert data["metrics"] == {
            "totalRecipients": 0,
            "openRate": 0.0,
            "clickRate": 0.0,
            "openedCount": 0,
            "clickedCount": 0,
        }

    async def test_title_required(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.post(
            "/api/newsletters", json={"title": "  "}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "title: Title is required"}

    async def test_list(self, async_client: AsyncClient, auth_headers: dict):
        await _create(async_client, auth_headers, title="One")
        await _create(async_client, auth_headers, title="Two")

        response = await async_client.get("/api/newsletters", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert sorted(n["title"] for n in body["data"]) == ["One", "Two"]

    async def test_update(self, async_client: AsyncClient, auth_headers: dict):
        created = await _create(async_client, auth_headers)

        response = await async_client.put(
            f"/api/newsletters/{created['id']}",
            json={"subject": "Updated subject"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["subject"] == "Updated subject"
        assert response.json()["data"]["title"] == "Monthly digest"

    async def test_delete(self, async_client: AsyncClient, auth_headers: dict):
        created = await _create(async_client, auth_headers)

        response = await async_client.delete(
            f"/api/newsletters/{created['id']}", headers=auth_headers
        )

        assert response.json() == {"success": True, "message": "Newsletter deleted successfully"}
        response = await async_client.get(
            f"/api/newsletters/{created['id']}", headers=auth_headers
        )
        assert response.status_code == 404


class TestSendNewsletter:
    async def test_send(self, async_client: AsyncClient, auth_headers: dict, make_analyst):
        await make_analyst()
        await make_analyst()
        await make_analyst(status="ARCHIVED")
        created = await _create(async_client, auth_headers)

        response = await async_client.post(
            f"/api/newsletters/{created['id']}/send", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "SENT"
        assert data["sentAt"] is not None
        assert data["metrics"]["totalRecipients"] == 2

    async def test_send_missing(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.post("/api/newsletters/missing/send", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Newsletter not found"}


class TestTracking:
    async def test_open_and_click(
        self, async_client: AsyncClient, auth_headers: dict, make_analyst
    ):
        for _ in range(4):
            await make_analyst()
        created = await _create(async_client, auth_headers)
        await async_client.post(f"/api/newsletters/{created['id']}/send", headers=auth_headers)

        # No auth required
        await async_client.get(f"/api/newsletters/{created['id']}/track/open")
        response = await async_client.get(f"/api/newsletters/{created['id']}/track/open")
        assert response.status_code == 200
        assert response.json()["data"]["openedCount"] == 2
        assert response.json()["data"]["openRate"] == 50.0

        response = await async_client.get(f"/api/newsletters/{created['id']}/track/click")
        metrics = response.json()["data"]
        assert metrics["clickedCount"] == 1
        assert metrics["clickRate"] == 25.0

    async def test_unknown_newsletter(self, async_client: AsyncClient):
        response = await async_client.get("/api/newsletters/missing/track/open")

        assert response.status_code == 404
        assert response.json()["error"] == "Newsletter not found"

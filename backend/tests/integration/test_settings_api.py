"""Integration tests for the organization settings endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import headers_for
from infrastructure.database.models import User

pytestmark = pytest.mark.asyncio

VALID_SETTINGS = {
    "companyName": "Acme HR",
    "protectedDomain": "AcmeHR.com",
    "logoUrl": "https://cdn.acmehr.com/logo.png",
    "industryName": "Workforce Software",
}


class TestGeneralSettings:
    async def test_defaults_created_on_first_read(
        self, async_client: AsyncClient, auth_headers: dict
    ):
        response = await async_client.get("/api/settings/general", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["companyName"] == ""
        assert data["protectedDomain"] == ""
        assert data["logoUrl"] == ""
        assert data["industryName"] == "HR Technology"

        again = await async_client.get("/api/settings/general", headers=auth_headers)
        assert again.json()["data"]["id"] == data["id"]

    async def test_update(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/general", json=VALID_SETTINGS, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["companyName"] == "Acme HR"
        assert data["protectedDomain"] == "acmehr.com"
        assert data["industryName"] == "Workforce Software"

        response = await async_client.get("/api/settings/general", headers=auth_headers)
        assert response.json()["data"]["companyName"] == "Acme HR"

    async def test_required_fields(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/general",
            json={**VALID_SETTINGS, "industryName": ""},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "Company name, protected domain, and industry name are required" in (
            response.json()["error"]
        )

    async def test_invalid_domain(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/general",
            json={**VALID_SETTINGS, "protectedDomain": "not a domain"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "protectedDomain: Invalid domain format"

    async def test_invalid_logo(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/general",
            json={**VALID_SETTINGS, "logoUrl": "ftp://example.com/logo.png"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "logoUrl: Invalid logo URL format"

    async def test_editor_can_read_not_write(
        self, async_client: AsyncClient, editor_headers: dict
    ):
        response = await async_client.get("/api/settings/general", headers=editor_headers)
        assert response.status_code == 200

        response = await async_client.put(
            "/api/settings/general", json=VALID_SETTINGS, headers=editor_headers
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Admin access required"


async def _create_topic(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {"name": "Payroll", "category": "CORE"}
    payload.update(fields)
    response = await client.post("/api/settings/topics", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestTopics:
    async def test_create_and_list_in_order(self, async_client: AsyncClient, auth_headers: dict):
        await _create_topic(async_client, auth_headers, name="  Talent  ", order=2)
        created = await _create_topic(
            async_client, auth_headers, name="Payroll", category="ADDITIONAL", description="  "
        )

        assert created["description"] is None
        assert created["category"] == "ADDITIONAL"

        response = await async_client.get("/api/settings/topics", headers=auth_headers)

        assert response.status_code == 200
        assert [t["name"] for t in response.json()["data"]] == ["Payroll", "Talent"]

    async def test_duplicate_name(self, async_client: AsyncClient, auth_headers: dict):
        await _create_topic(async_client, auth_headers)

        response = await async_client.post(
            "/api/settings/topics",
            json={"name": " Payroll ", "category": "CORE"},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"] == "A topic with this name already exists"

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"name": "", "category": "CORE"}, "name: Name and category are required"),
            ({"name": "HR", "category": "OTHER"}, "category: Category must be CORE or ADDITIONAL"),
        ],
    )
    async def test_validation(
        self, async_client: AsyncClient, auth_headers: dict, payload: dict, message: str
    ):
        response = await async_client.post(
            "/api/settings/topics", json=payload, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == message

    async def test_update(self, async_client: AsyncClient, auth_headers: dict):
        topic = await _create_topic(async_client, auth_headers)
        await _create_topic(async_client, auth_headers, name="Benefits")

        response = await async_client.put(
            f"/api/settings/topics/{topic['id']}",
            json={"name": "Payroll & Tax", "category": "ADDITIONAL", "order": 5},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Payroll & Tax"
        assert response.json()["data"]["order"] == 5

        response = await async_client.put(
            f"/api/settings/topics/{topic['id']}",
            json={"name": "Benefits", "category": "CORE"},
            headers=auth_headers,
        )
        assert response.status_code == 409

    async def test_update_missing(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/topics/missing",
            json={"name": "X", "category": "CORE"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Topic not found"

    async def test_delete(self, async_client: AsyncClient, auth_headers: dict):
        topic = await _create_topic(async_client, auth_headers)

        response = await async_client.delete(
            f"/api/settings/topics/{topic['id']}", headers=auth_headers
        )
        assert response.json() == {"success": True, "message": "Topic deleted"}

        response = await async_client.delete(
            f"/api/settings/topics/{topic['id']}", headers=auth_headers
        )
        assert response.status_code == 404

    async def test_delete_topic_in_use(
        self, async_client: AsyncClient, auth_headers: dict, analyst
    ):
        topic = await _create_topic(async_client, auth_headers, name="HR Tech")

        response = await async_client.delete(
            f"/api/settings/topics/{topic['id']}", headers=auth_headers
        )

        assert response.status_code == 409
        assert response.json()["error"] == (
            "Cannot delete topic that is currently assigned to analysts"
        )

    async def test_editor_can_read_not_write(
        self, async_client: AsyncClient, editor_headers: dict
    ):
        response = await async_client.get("/api/settings/topics", headers=editor_headers)
        assert response.status_code == 200

        response = await async_client.post(
            "/api/settings/topics",
            json={"name": "Payroll", "category": "CORE"},
            headers=editor_headers,
        )
        assert response.status_code == 403


TIERS = [
    {"name": "Tier 1", "briefingFrequency": 30, "touchpointFrequency": 7, "isActive": True},
    {"name": "Tier 2", "briefingFrequency": -1, "touchpointFrequency": 14, "isActive": False},
]


class TestInfluenceTiers:
    async def test_empty(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.get("/api/settings/influence-tiers", headers=auth_headers)

        assert response.json() == {"success": True, "data": [], "total": 0}

    async def test_save_replaces_all(self, async_client: AsyncClient, auth_headers: dict):
        await async_client.post(
            "/api/settings/influence-tiers",
            json={"tiers": [{"name": "Old", "briefingFrequency": 90}]},
            headers=auth_headers,
        )

        response = await async_client.post(
            "/api/settings/influence-tiers",
            json={"tiers": [{**TIERS[0], "id": "client-id"}, TIERS[1]]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        saved = response.json()["data"]
        assert [t["name"] for t in saved] == ["Tier 1", "Tier 2"]
        assert [t["order"] for t in saved] == [1, 2]
        assert saved[0]["id"] != "client-id"
        assert saved[0]["color"] == "#6b7280"
        assert saved[1]["briefingFrequency"] == -1
        assert saved[1]["isActive"] is False

        response = await async_client.get("/api/settings/influence-tiers", headers=auth_headers)
        assert [t["name"] for t in response.json()["data"]] == ["Tier 1", "Tier 2"]

    async def test_never_is_stored_as_null(
        self, async_client: AsyncClient, auth_headers: dict, db_session: AsyncSession
    ):
        from sqlalchemy import select

        from infrastructure.database.models import InfluenceTier

        await async_client.post(
            "/api/settings/influence-tiers", json={"tiers": TIERS}, headers=auth_headers
        )

        tier = (
            await db_session.execute(select(InfluenceTier).where(InfluenceTier.name == "Tier 2"))
        ).scalar_one()
        assert tier.briefing_frequency is None
        assert tier.touchpoint_frequency == 14

    @pytest.mark.parametrize(
        "tier,message",
        [
            ({"name": " "}, "tiers.0.name: Each tier must have a name"),
            (
                {"name": "T", "briefingFrequency": 0},
                'tiers.0.briefingFrequency: Briefing frequency must be at least 1 day or -1 for "Never"',
            ),
            (
                {"name": "T", "touchpointFrequency": -5},
                'tiers.0.touchpointFrequency: Touchpoint frequency must be at least 1 day or -1 for "Never"',
            ),
        ],
    )
    async def test_validation(
        self, async_client: AsyncClient, auth_headers: dict, tier: dict, message: str
    ):
        response = await async_client.post(
            "/api/settings/influence-tiers", json={"tiers": [tier]}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == message

    async def test_tiers_required(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.post(
            "/api/settings/influence-tiers", json={}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("tiers:")

    async def test_editor_cannot_save(self, async_client: AsyncClient, editor_headers: dict):
        response = await async_client.post(
            "/api/settings/influence-tiers", json={"tiers": TIERS}, headers=editor_headers
        )
        assert response.status_code == 403


PORTAL_SETTINGS = {
    "welcomeQuote": "  Great partners make great products.  ",
    "quoteAuthor": "Jane Doe",
    "authorImageUrl": "https://cdn.acmehr.com/jane.png",
}


class TestAnalystPortalSettings:
    async def test_defaults_created_on_first_read(
        self, async_client: AsyncClient, auth_headers: dict
    ):
        response = await async_client.get("/api/settings/analyst-portal", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["welcomeQuote"] == ""
        assert data["quoteAuthor"] == ""
        assert data["authorImageUrl"] == ""

    async def test_update(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.put(
            "/api/settings/analyst-portal", json=PORTAL_SETTINGS, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["welcomeQuote"] == "Great partners make great products."

        response = await async_client.put(
            "/api/settings/analyst-portal",
            json={**PORTAL_SETTINGS, "authorImageUrl": None},
            headers=auth_headers,
        )
        assert response.json()["data"]["authorImageUrl"] == ""

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"quoteAuthor": ""}, "quoteAuthor: Welcome quote and author are required"),
            ({"welcomeQuote": "   "}, "welcomeQuote: Welcome quote and author are required"),
            (
                {"authorImageUrl": "not a url"},
                "authorImageUrl: Please enter a valid author image URL",
            ),
        ],
    )
    async def test_validation(
        self, async_client: AsyncClient, auth_headers: dict, overrides: dict, message: str
    ):
        response = await async_client.put(
            "/api/settings/analyst-portal",
            json={**PORTAL_SETTINGS, **overrides},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == message

    async def test_portal_account_can_read_not_write(
        self, async_client: AsyncClient, portal_user: User
    ):
        headers = headers_for(portal_user)

        response = await async_client.get("/api/settings/analyst-portal", headers=headers)
        assert response.status_code == 200

        response = await async_client.put(
            "/api/settings/analyst-portal", json=PORTAL_SETTINGS, headers=headers
        )
        assert response.status_code == 403

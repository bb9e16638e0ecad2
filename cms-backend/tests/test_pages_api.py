"""API tests for page creation, editing and version history endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


def page_body(title: str = "Home", **extra) -> dict:
    return {
        "title": title,
        "sections": [{"sectionKey": "hero", "title": "Welcome"}],
        **extra,
    }


@pytest.mark.asyncio
class TestCreatePage:
    """Tests for POST /api/pages."""

    async def test_create_page(self, client: AsyncClient):
        response = await client.post(
            "/api/pages",
            json={"pageKey": "home", "state": page_body(), "createdBy": "alice"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["pageKey"] == "home"
        assert data["versionNumber"] == 1
        assert data["state"]["title"] == "Home"
        assert data["state"]["sections"][0]["sectionKey"] == "hero"

    async def test_duplicate_key(self, client: AsyncClient):
        body = {"pageKey": "home", "state": page_body()}
        await client.post("/api/pages", json=body)

        response = await client.post("/api/pages", json=body)

        assert response.status_code == 409
        assert response.json()["error"] == "page_exists"

    async def test_duplicate_section_keys_rejected(self, client: AsyncClient):
        state = {
            "title": "Home",
            "sections": [{"sectionKey": "hero"}, {"sectionKey": "hero"}],
        }

        response = await client.post("/api/pages", json={"pageKey": "home", "state": state})

        assert response.status_code == 422

    async def test_title_required(self, client: AsyncClient):
        response = await client.post("/api/pages", json={"pageKey": "home", "state": {}})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestUpdatePage:
    """Tests for GET and PUT /api/pages/{page_id}."""

    async def test_get_current(self, client: AsyncClient, home_page):
        page_id, _, v2 = home_page

        response = await client.get(f"/api/pages/{page_id}")

        assert response.status_code == 200
        assert response.json()["versionId"] == str(v2.id)
        assert response.json()["versionNumber"] == 2

    async def test_get_unknown_page(self, client: AsyncClient):
        response = await client.get(f"/api/pages/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_edit_appends_version(self, client: AsyncClient, home_page):
        page_id, _, _ = home_page

        response = await client.put(
            f"/api/pages/{page_id}",
            json={
                "state": page_body("Start"),
                "changedBy": "bob",
                "changeDescription": "Rename",
                "expectedVersion": 2,
            },
        )

        assert response.status_code == 200
        assert response.json()["versionNumber"] == 3
        assert response.json()["state"]["title"] == "Start"

    async def test_edit_with_stale_version(self, client: AsyncClient, home_page):
        page_id, _, _ = home_page

        response = await client.put(
            f"/api/pages/{page_id}",
            json={"state": page_body("Start"), "expectedVersion": 1},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "version_conflict"

    async def test_edit_unknown_page(self, client: AsyncClient):
        response = await client.put(f"/api/pages/{uuid4()}", json={"state": page_body()})

        assert response.status_code == 404


@pytest.mark.asyncio
class TestVersionHistory:
    """Tests for the page version list and stats endpoints."""

    async def test_list_versions(self, client: AsyncClient, home_page):
        page_id, v1, v2 = home_page

        response = await client.get(f"/api/pages/{page_id}/versions")

        assert response.status_code == 200
        data = response.json()
        assert data["pageId"] == str(page_id)
        assert [item["id"] for item in data["items"]] == [str(v2.id), str(v1.id)]
        assert "state" not in data["items"][0]

    async def test_list_versions_limit(self, client: AsyncClient, home_page):
        page_id, _, v2 = home_page

        response = await client.get(f"/api/pages/{page_id}/versions", params={"limit": 1})

        assert [item["versionNumber"] for item in response.json()["items"]] == [2]

    async def test_list_unknown_page(self, client: AsyncClient):
        response = await client.get(f"/api/pages/{uuid4()}/versions")

        assert response.status_code == 404

    async def test_stats(self, client: AsyncClient, home_page):
        page_id, _, v2 = home_page

        response = await client.get(f"/api/pages/{page_id}/versions/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["totalVersions"] == 2
        assert data["latestVersionNumber"] == 2
        assert data["publishedVersions"] == 0
        assert data["latestVersion"]["id"] == str(v2.id)

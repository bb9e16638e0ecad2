"""API tests for the compare, restore and snapshot endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from conftest import make_state


@pytest.mark.asyncio
class TestCompareEndpoint:
    """Tests for GET /api/versions/compare."""

    async def test_compare_example_scenario(self, client: AsyncClient, home_page):
        page_id, v1, v2 = home_page

        response = await client.get(
            "/api/versions/compare",
            params={"documentId": str(page_id), "v1": str(v1.id), "v2": str(v2.id)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["version1"]["versionNumber"] == 1
        assert data["version1"]["createdBy"] == "alice"
        assert "createdAt" in data["version1"]
        assert data["version2"]["versionNumber"] == 2
        assert data["pageChanges"] == {}

        hero, cta = data["sectionChanges"]
        assert hero["type"] == "modified"
        assert hero["sectionKey"] == "hero"
        assert hero["changes"] == {"title": {"old": "Welcome", "new": "Welcome!"}}
        assert cta["type"] == "added"
        assert cta["sectionKey"] == "cta"
        assert cta["section"]["title"] == "Sign up"

        assert data["summary"]["sectionsAdded"] == 1
        assert data["summary"]["sectionsModified"] == 1
        assert data["metadataChanges"] == {
            "changeDescription": {"old": "Initial version", "new": "Add call to action"},
        }
        assert data["summary"]["metadataChanges"] == 1
        assert data["summary"]["totalChanges"] == 3

    async def test_compare_same_snapshot(self, client: AsyncClient, home_page):
        page_id, v1, _ = home_page

        response = await client.get(
            "/api/versions/compare",
            params={"documentId": str(page_id), "v1": str(v1.id), "v2": str(v1.id)},
        )

        assert response.status_code == 200
        assert response.json()["pageChanges"] == {}
        assert response.json()["sectionChanges"] == []

    async def test_compare_different_pages(self, client: AsyncClient, store, home_page):
        page_id, v1, _ = home_page
        _, other = await store.create_page("about", make_state("About"))

        response = await client.get(
            "/api/versions/compare",
            params={"documentId": str(page_id), "v1": str(v1.id), "v2": str(other.id)},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_comparison"
        assert str(other.id) in response.json()["message"]

    async def test_compare_wrong_document(self, client: AsyncClient, home_page):
        _, v1, v2 = home_page

        response = await client.get(
            "/api/versions/compare",
            params={"documentId": str(uuid4()), "v1": str(v1.id), "v2": str(v2.id)},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_compare_missing_snapshot(self, client: AsyncClient, home_page):
        page_id, v1, _ = home_page

        response = await client.get(
            "/api/versions/compare",
            params={"documentId": str(page_id), "v1": str(v1.id), "v2": str(uuid4())},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_compare_requires_params(self, client: AsyncClient):
        response = await client.get("/api/versions/compare", params={"v1": str(uuid4())})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestComparePublishedEndpoint:
    """Tests for GET /api/versions/compare-published."""

    async def test_draft_against_published(self, client: AsyncClient, store, home_page):
        page_id, _, _ = home_page
        published = await store.create_snapshot(
            page_id,
            make_state("Home", status="published"),
            created_by="alice",
            change_description="Go live",
        )
        draft = await store.create_snapshot(
            page_id,
            make_state("Home", status="draft", metaTitle="Welcome home"),
            created_by="bob",
            change_description="Go live",
        )

        response = await client.get(
            "/api/versions/compare-published", params={"documentId": str(page_id)}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["version1"]["id"] == str(published.id)
        assert data["version2"]["id"] == str(draft.id)
        assert data["pageChanges"] == {
            "metaTitle": {"old": None, "new": "Welcome home"},
            "status": {"old": "published", "new": "draft"},
        }
        assert data["metadataChanges"] == {"createdBy": {"old": "alice", "new": "bob"}}
        assert data["summary"]["totalChanges"] == 3

    async def test_latest_is_published(self, client: AsyncClient, store, home_page):
        page_id, _, _ = home_page
        await store.create_snapshot(page_id, make_state("Home", status="published"))

        response = await client.get(
            "/api/versions/compare-published", params={"documentId": str(page_id)}
        )

        assert response.status_code == 200
        assert response.json()["pageChanges"] == {}
        assert response.json()["sectionChanges"] == []
        assert response.json()["summary"]["totalChanges"] == 0

    async def test_never_published(self, client: AsyncClient, home_page):
        page_id, _, _ = home_page

        response = await client.get(
            "/api/versions/compare-published", params={"documentId": str(page_id)}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
class TestRestoreEndpoint:
    """Tests for POST /api/versions/restore."""

    async def test_restore(self, client: AsyncClient, store, home_page):
        page_id, v1, _ = home_page

        response = await client.post(
            "/api/versions/restore",
            json={"documentId": str(page_id), "targetSnapshotId": str(v1.id)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["newVersionNumber"] == 3
        assert data["message"] == "Restored to version 1"

        # The restored version compares empty against the target
        compare = await client.get(
            "/api/versions/compare",
            params={"documentId": str(page_id), "v1": str(v1.id), "v2": data["newVersionId"]},
        )
        assert compare.json()["pageChanges"] == {}
        assert compare.json()["sectionChanges"] == []

    async def test_restore_latest_is_no_op(self, client: AsyncClient, home_page):
        page_id, _, v2 = home_page

        response = await client.post(
            "/api/versions/restore",
            json={"documentId": str(page_id), "targetSnapshotId": str(v2.id)},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "no_op"
        assert str(v2.id) in response.json()["message"]

    async def test_restore_unknown_snapshot(self, client: AsyncClient, home_page):
        page_id, _, _ = home_page

        response = await client.post(
            "/api/versions/restore",
            json={"documentId": str(page_id), "targetSnapshotId": str(uuid4())},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_restore_snapshot_of_other_page(self, client: AsyncClient, home_page):
        _, v1, _ = home_page

        response = await client.post(
            "/api/versions/restore",
            json={"documentId": str(uuid4()), "targetSnapshotId": str(v1.id)},
        )

        assert response.status_code == 404

    async def test_restore_invalid_body(self, client: AsyncClient):
        response = await client.post("/api/versions/restore", json={"documentId": "nope"})

        assert response.status_code == 422


@pytest.mark.asyncio
class TestGetVersion:
    """Tests for GET /api/versions/{snapshot_id}."""

    async def test_get_version(self, client: AsyncClient, home_page):
        page_id, _, v2 = home_page

        response = await client.get(f"/api/versions/{v2.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(v2.id)
        assert data["pageId"] == str(page_id)
        assert data["versionNumber"] == 2
        assert data["changeDescription"] == "Add call to action"
        assert [s["sectionKey"] for s in data["state"]["sections"]] == ["hero", "cta"]

    async def test_get_version_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/versions/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

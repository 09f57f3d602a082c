"""Integration tests for features API."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


async def create_feature(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post("/api/v1/features", headers=headers, json=fields)
    assert response.status_code == 201
    return response.json()["data"]["feature"]


async def create_document(client: AsyncClient, headers: dict, **fields) -> dict:
    response = await client.post("/api/v1/docs", headers=headers, json=fields)
    assert response.status_code == 201
    return response.json()["data"]["document"]


@pytest.mark.asyncio
class TestFeaturesAPI:
    """Integration tests for feature endpoints."""

    async def test_create_feature(self, client: AsyncClient, auth_headers: dict):
        feature = await create_feature(
            client, auth_headers, title="Search", description="Full text search"
        )

        assert feature["title"] == "Search"
        assert feature["description"] == "Full text search"
        assert feature["status"] == "active"

    async def test_create_feature_requires_title(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/features", headers=auth_headers, json={})

        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_list_features_counts_documents(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ):
        busy = await create_feature(client, auth_headers, title="Busy")
        await create_feature(client, auth_headers, title="Idle")
        await create_feature(client, other_headers, title="Theirs")
        await create_document(client, auth_headers, feature_id=busy["id"])
        await create_document(client, auth_headers, feature_id=busy["id"])

        response = await client.get("/api/v1/features", headers=auth_headers)

        assert response.status_code == 200
        counts = {f["title"]: f["document_count"] for f in response.json()["data"]["features"]}
        assert counts == {"Busy": 2, "Idle": 0}

    async def test_get_feature_with_documents(self, client: AsyncClient, auth_headers: dict):
        feature = await create_feature(client, auth_headers, title="Export")
        doc = await create_document(
            client, auth_headers, title="Design", content="body", feature_id=feature["id"]
        )
        await create_document(client, auth_headers, title="Unrelated")

        response = await client.get(f"/api/v1/features/{feature['id']}", headers=auth_headers)

        assert response.status_code == 200
        detail = response.json()["data"]["feature"]
        assert detail["title"] == "Export"
        assert [d["id"] for d in detail["documents"]] == [doc["id"]]
        assert "content" not in detail["documents"][0]

    async def test_get_other_users_feature(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ):
        feature = await create_feature(client, other_headers, title="Private")

        response = await client.get(f"/api/v1/features/{feature['id']}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Feature not found"

    async def test_update_feature(self, client: AsyncClient, auth_headers: dict):
        feature = await create_feature(client, auth_headers, title="Draft")

        response = await client.put(
            f"/api/v1/features/{feature['id']}",
            headers=auth_headers,
            json={"title": "Final", "status": "done"},
        )

        assert response.status_code == 200
        updated = response.json()["data"]["feature"]
        assert updated["title"] == "Final"
        assert updated["status"] == "done"

    async def test_document_filter_by_feature(self, client: AsyncClient, auth_headers: dict):
        feature = await create_feature(client, auth_headers, title="Filter")
        await create_document(client, auth_headers, title="In", feature_id=feature["id"])
        await create_document(client, auth_headers, title="Out")

        response = await client.get(
            "/api/v1/docs", headers=auth_headers, params={"feature_id": feature["id"]}
        )

        assert [d["title"] for d in response.json()["data"]["documents"]] == ["In"]

    async def test_create_document_in_foreign_feature(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ):
        feature = await create_feature(client, other_headers, title="Theirs")

        response = await client.post(
            "/api/v1/docs",
            headers=auth_headers,
            json={"title": "Sneaky", "feature_id": feature["id"]},
        )

        assert response.status_code == 404

    async def test_delete_feature_cascades_documents(
        self, client: AsyncClient, auth_headers: dict, content_collection
    ):
        feature = await create_feature(client, auth_headers, title="Doomed")
        first = await create_document(
            client, auth_headers, content="one", feature_id=feature["id"]
        )
        second = await create_document(
            client, auth_headers, content="two", feature_id=feature["id"]
        )
        survivor = await create_document(client, auth_headers, content="stay")

        response = await client.delete(
            f"/api/v1/features/{feature['id']}", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Feature deleted"}

        for doc in (first, second):
            response = await client.get(f"/api/v1/docs/{doc['id']}", headers=auth_headers)
            assert response.status_code == 404
            assert doc["id"] not in content_collection.documents

        assert survivor["id"] in content_collection.documents
        response = await client.get(f"/api/v1/features/{feature['id']}", headers=auth_headers)
        assert response.status_code == 404

    async def test_failed_commit_keeps_document_bodies(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        content_collection,
        monkeypatch,
    ):
        feature = await create_feature(client, auth_headers, title="Fragile")
        doc = await create_document(
            client, auth_headers, content="keep", feature_id=feature["id"]
        )
        monkeypatch.setattr(
            db_session, "commit", AsyncMock(side_effect=SQLAlchemyError("commit failed"))
        )

        response = await client.delete(
            f"/api/v1/features/{feature['id']}", headers=auth_headers
        )

        assert response.status_code == 500
        assert content_collection.documents[doc["id"]]["content"] == "keep"

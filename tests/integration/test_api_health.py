"""Integration tests for health checks and the error envelope."""

from datetime import datetime

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestHealth:
    async def test_root_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        datetime.fromisoformat(body["timestamp"])

    async def test_api_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"


@pytest.mark.asyncio
class TestErrorEnvelope:
    """Errors share the {success, message, error?} shape."""

    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Route GET /api/v1/nowhere not found",
        }

    async def test_unhandled_error_hides_details(
        self, client: AsyncClient, auth_headers: dict, fake_ai, monkeypatch
    ):
        async def explode(content: str) -> str:
            raise RuntimeError("kaboom")

        monkeypatch.setattr(fake_ai, "refine", explode)

        response = await client.post(
            "/api/v1/ai/refine", headers=auth_headers, json={"content": "x"}
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}

    async def test_rate_limit_headers_present(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/docs", headers=auth_headers)

        assert response.status_code == 200
        assert "X-RateLimit-Remaining" in response.headers

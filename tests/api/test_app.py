"""Tests for application-level routes and middleware."""

import pytest


@pytest.mark.api
class TestApp:
    async def test_root(self, client):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Trust Engine"
        assert response.json()["status"] == "running"

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    async def test_request_id_is_generated(self, client):
        response = await client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 32

    async def test_error_payload_carries_request_id(self, client, moderator, auth_headers):
        response = await client.get(
            "/api/v1/moderation/reports/999",
            headers={**auth_headers(moderator), "X-Request-ID": "trace-me"},
        )

        assert response.status_code == 404
        assert response.json()["request_id"] == "trace-me"

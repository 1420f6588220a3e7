"""
Integration tests for health check endpoints.

Tests the /, /health, /ready, and /live endpoints.
"""

import pytest

from app.core.docuware_client import CabinetClientError


@pytest.fixture
def ready_service(monkeypatch, document_service):
    """Point the readiness check at the in-memory cabinet."""
    monkeypatch.setattr("app.api.health.document_service", document_service)
    return document_service


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_health_endpoint(self, async_client):
        """Test /health endpoint returns 200 OK."""
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_live_endpoint(self, async_client):
        """Test /live endpoint returns 200 OK."""
        response = await async_client.get("/live")

        assert response.status_code == 200
        assert response.json()["alive"] is True

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_ready_endpoint_success(self, async_client, ready_service, fake_client):
        """Test /ready endpoint when the cabinet accepts a session."""
        response = await async_client.get("/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True
        assert fake_client.sessions_opened == fake_client.sessions_closed == 1

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_ready_endpoint_cabinet_unavailable(
        self, async_client, ready_service, fake_client
    ):
        """Test /ready endpoint when no session can be opened."""
        fake_client.fail_on["connect"] = CabinetClientError("connection refused")

        response = await async_client.get("/ready")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_process_time_header(self, async_client):
        response = await async_client.get("/live")

        assert "x-process-time" in response.headers

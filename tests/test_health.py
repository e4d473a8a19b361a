"""Tests for GET /health endpoint."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from sinapse_regulation.main import app
from sinapse_regulation.services.firestore import RegulationFirestore


async def _get_health():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get("/health")


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_healthy_with_store_and_pubsub(self, mock_pubsub):
        store = AsyncMock(spec=RegulationFirestore)
        store.health_check.return_value = True
        app.state.firestore = store
        app.state.pubsub = mock_pubsub

        response = await _get_health()

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["checks"] == {"firestore": "ok", "pubsub": "ok"}
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_unhealthy_when_store_fails(self, mock_pubsub):
        store = AsyncMock(spec=RegulationFirestore)
        store.health_check.return_value = False
        app.state.firestore = store
        app.state.pubsub = mock_pubsub

        response = await _get_health()

        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_degraded_without_pubsub(self):
        store = AsyncMock(spec=RegulationFirestore)
        store.health_check.return_value = True
        app.state.firestore = store
        app.state.pubsub = None

        response = await _get_health()

        assert response.json()["status"] == "degraded"
        assert response.json()["checks"]["pubsub"] == "not_configured"

"""Integration tests for health endpoints."""

from unittest.mock import AsyncMock, patch

from sqlalchemy.exc import OperationalError


class TestHealthAPI:
    """Test health check endpoints."""

    def test_basic_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")

    def test_liveness(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["alive"] is True

    def test_readiness_with_database(self, live_client):
        response = live_client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["ready"] is True
        assert data["checks"]["database"]["status"] == "ready"
        assert data["checks"]["redis"]["status"] == "not_configured"

    def test_readiness_without_database(self, client):
        failing_ping = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("down")))

        with patch("tokenauth.api.v1.endpoints.health.routes.ping_database", failing_ping):
            response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["ready"] is False
        assert data["checks"]["database"]["status"] == "not_ready"

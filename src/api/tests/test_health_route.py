"""Tests for the /health endpoint."""

import unittest
from unittest.mock import patch, MagicMock

from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from api.main import app
from api.rate_limit import limiter


class TestHealthRoute(unittest.TestCase):

    def setUp(self):
        limiter.reset()
        self.client = TestClient(app)

    @patch('api.routes.health.get_mongodb_client')
    def test_healthy_when_ping_succeeds(self, mock_get_client):
        mock_get_client.return_value = MagicMock()

        response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["mongodb"]["status"] == "healthy"
        assert data["timestamp"].endswith("Z")

    @patch('api.routes.health.get_mongodb_client')
    def test_degraded_when_not_configured(self, mock_get_client):
        mock_get_client.return_value = None

        response = self.client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    @patch('api.routes.health.get_mongodb_client')
    def test_degraded_when_ping_fails(self, mock_get_client):
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        mock_get_client.return_value = client

        response = self.client.get("/health")

        assert response.status_code == 503
        assert "no servers" in response.json()["services"]["mongodb"]["message"]

    def test_root_reports_service(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Travel Planner API"

    def test_unknown_route_uses_message_body(self):
        response = self.client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}


if __name__ == '__main__':
    unittest.main()

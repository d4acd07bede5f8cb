"""
Unit tests for main FastAPI application.

Tests the root endpoints, health checks and global exception handlers.
"""

import asyncio
import json
from unittest.mock import Mock

from fastapi.testclient import TestClient

from main import app, global_exception_handler, value_error_handler


class TestRootEndpoints:
    """Test root API endpoints."""

    def test_root_endpoint(self):
        client = TestClient(app)
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "VetCare Scheduling Backend API"
        assert data["status"] == "running"

    def test_health_endpoint(self):
        client = TestClient(app)
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_routes_registered(self):
        paths = {route.path for route in app.routes}
        assert "/api/appointments" in paths
        assert "/api/appointments/{appointment_id}/reschedule" in paths
        assert "/api/appointments/{appointment_id}/status" in paths
        assert "/api/vets/{vet_id}/availability/{slot_id}" in paths


class TestExceptionHandlers:
    """Global handlers keep the structured error shape."""

    def test_value_error_handler(self):
        response = asyncio.run(value_error_handler(Mock(), ValueError("bad value")))

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["detail"] == {"error": "invalid_input", "message": "bad value"}

    def test_global_exception_handler(self):
        response = asyncio.run(global_exception_handler(Mock(), RuntimeError("boom")))

        assert response.status_code == 500
        assert json.loads(response.body)["detail"]["error"] == "internal_error"

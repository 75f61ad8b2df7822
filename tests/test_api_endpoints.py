"""
Tests for the development enrollment service

This test suite verifies:
- Health check and root endpoints
- The enrollment upload contract (multipart image -> {ok, message})
- End-to-end: the wizard's client talking to the service

Run with: pytest tests/test_api_endpoints.py -v
"""

import os
import sys

import numpy as np
import pytest
from unittest.mock import patch

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from frontend.components.webcam_capture import encode_jpeg


@pytest.fixture
def client():
    """Create test client with an empty registry."""
    from api.app import app
    from api.routes.enrollment import get_registry

    get_registry().clear()
    with TestClient(app) as test_client:
        yield test_client
    get_registry().clear()


@pytest.fixture
def jpeg():
    frame = np.random.randint(0, 255, (60, 80, 3), dtype=np.uint8)
    return encode_jpeg(frame)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_status(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["enrolled_faces"] == 0

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "name" in data
        assert "version" in data
        assert "docs" in data


class TestEnrollEndpoint:
    """Tests for POST /api/biometrics/enroll."""

    def test_enroll_accepts_jpeg(self, client, jpeg):
        response = client.post(
            "/api/biometrics/enroll",
            files={"image": ("face.jpg", jpeg, "image/jpeg")},
        )
        assert response.status_code == 200
        assert response.json()["ok"] is True

        assert client.get("/health").json()["enrolled_faces"] == 1

    def test_enroll_rejects_undecodable_image(self, client):
        response = client.post(
            "/api/biometrics/enroll",
            files={"image": ("face.jpg", b"definitely not a jpeg", "image/jpeg")},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["ok"] is False
        assert data["message"] == "Invalid image"

    def test_enroll_rejects_duplicate(self, client, jpeg):
        files = {"image": ("face.jpg", jpeg, "image/jpeg")}
        client.post("/api/biometrics/enroll", files=files)

        response = client.post("/api/biometrics/enroll", files=files)

        data = response.json()
        assert data["ok"] is False
        assert data["message"] == "This face is already enrolled"

    def test_enroll_requires_image_field(self, client, jpeg):
        response = client.post(
            "/api/biometrics/enroll",
            files={"photo": ("face.jpg", jpeg, "image/jpeg")},
        )
        assert response.status_code == 422


class TestWizardAgainstService:
    """Runs the real client against the service through TestClient."""

    def test_client_round_trip(self, client, jpeg):
        from frontend.api_client import EnrollmentClient, ServiceRejection

        def post_via_testclient(url, files=None, timeout=None):
            path = url.split("backend.test", 1)[1]
            return client.post(path, files=files)

        enrollment_client = EnrollmentClient()
        enrollment_client.config.base_url = "http://backend.test"

        with patch("frontend.api_client.httpx.post", side_effect=post_via_testclient):
            assert enrollment_client.enroll(jpeg).ok is True
            with pytest.raises(ServiceRejection, match="already enrolled"):
                enrollment_client.enroll(jpeg)


class TestSchemas:
    """Tests for Pydantic schemas."""

    def test_enroll_response(self):
        from api.schemas import EnrollResponse

        data = EnrollResponse(ok=False, message="duplicate face").model_dump()
        assert data == {"ok": False, "message": "duplicate face"}

    def test_enroll_response_message_optional(self):
        from api.schemas import EnrollResponse

        assert EnrollResponse(ok=True).message is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

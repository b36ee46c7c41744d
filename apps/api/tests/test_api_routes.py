"""
HTTP-level tests for routing, auth guards and error mapping.

The lifespan is not run: no database, Redis or scheduler is started.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.auth import get_current_user
from app.core.database import get_db
from app.main import app
from app.modules.shared import NotFoundError


@pytest.fixture
def client(mock_db):
    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(make_actor):
    def _sign_in(role: str):
        actor = make_actor(role)
        app.dependency_overrides[get_current_user] = lambda: actor
        return actor

    return _sign_in


class TestRoutes:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_protected_route_requires_token(self, client):
        assert client.get("/api/v1/dashboard/navigation").status_code in (401, 403)

    def test_navigation_for_parent(self, client, signed_in):
        signed_in("parent")
        body = client.get("/api/v1/dashboard/navigation").json()
        assert body["role"] == "parent"
        assert [i["label"] for i in body["items"]] == ["Overview", "Announcements", "Messages", "Billing"]

    def test_teacher_cannot_list_teachers(self, client, signed_in):
        signed_in("teacher")
        response = client.get("/api/v1/teachers")
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "PERMISSION_DENIED"

    def test_service_errors_map_to_structured_responses(self, client, signed_in):
        signed_in("school_admin")
        with patch(
            "app.modules.schools.service.get_current_school",
            AsyncMock(side_effect=NotFoundError("School", "s1")),
        ):
            response = client.get("/api/v1/schools/current")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "SCHOOL_NOT_FOUND"

    def test_register_validation_error(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "first_name": "A",
                "last_name": "B",
                "email": "a@lincoln.edu",
                "school_name": "Lincoln High",
                "password": "secret123",
                "confirm_password": "mismatch",
            },
        )
        assert response.status_code == 422

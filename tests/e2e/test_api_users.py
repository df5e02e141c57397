"""
test_api_users.py - Users / Auth / Admin API E2E 테스트

엔드포인트:
- POST   /api/v1/users
- GET    /api/v1/users
- GET    /api/v1/users/{id}
- GET    /api/v1/users/by-name/{username}
- PUT    /api/v1/users/{id}
- DELETE /api/v1/users/{id}
- POST   /api/v1/auth/login|logout|refresh
- GET    /api/v1/admin/users/stats
- POST   /api/v1/admin/users/{id}/activate|deactivate
- GET    /health
"""

import pytest
from argon2 import PasswordHasher

from src.repository import UserRepository


def create_user(client, username: str, **extra) -> dict:
    payload = {
        "username": username,
        "email": f"{username}@example.com",
        "password": "password123",
        **extra,
    }
    response = client.post("/api/v1/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# =============================================================================
# Create
# =============================================================================


class TestCreateUser:
    """POST /api/v1/users."""

    def test_create_user(self, client):
        response = client.post(
            "/api/v1/users",
            json={
                "username": "alice",
                "email": "alice@example.com",
                "password": "password123",
                "full_name": "Alice Kim",
                "is_active": True,
                "metadata": {"team": "ops"},
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["id"]
        assert data["username"] == "alice"
        assert data["full_name"] == "Alice Kim"
        assert data["is_active"] is True
        assert data["metadata"] == {"team": "ops"}
        assert data["tenant_id"] == "default"

    def test_form_metadata_json_string(self, client):
        """form 필드의 JSON 문자열 metadata → dict."""
        response = client.post(
            "/api/v1/users",
            data={
                "username": "bob",
                "email": "bob@example.com",
                "password": "password123",
                "metadata": '{"team": "dev"}',
            },
        )

        assert response.status_code == 201
        assert response.json()["data"]["metadata"] == {"team": "dev"}

    def test_form_metadata_not_json(self, client):
        response = client.post(
            "/api/v1/users",
            data={
                "username": "bob",
                "email": "bob@example.com",
                "password": "password123",
                "metadata": "team=dev",
            },
        )

        assert response.status_code == 400
        assert "metadata" in response.json()["fields"]

    def test_password_never_returned(self, client):
        data = create_user(client, "alice")

        assert "password" not in data
        assert "password_hash" not in data

    def test_password_stored_hashed(self, client):
        data = create_user(client, "alice")

        repo = UserRepository(client.app.state.database)
        stored = repo.get_user_by_id("default", data["id"])
        assert stored.password_hash != "password123"
        assert PasswordHasher().verify(stored.password_hash, "password123")

    def test_inactive_by_default(self, client):
        assert create_user(client, "alice")["is_active"] is False

    def test_form_encoded_body(self, client):
        response = client.post(
            "/api/v1/users",
            data={"username": "bob", "email": "bob@example.com", "password": "password123"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["username"] == "bob"

    def test_missing_required_fields(self, client):
        response = client.post("/api/v1/users", json={"username": "alice"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_FAILED"
        assert set(body["fields"]) == {"email", "password"}

    def test_invalid_email(self, client):
        response = client.post(
            "/api/v1/users",
            json={"username": "alice", "email": "nope", "password": "password123"},
        )

        assert response.status_code == 400
        assert "email" in response.json()["fields"]

    def test_duplicate_username(self, client):
        create_user(client, "alice")

        response = client.post(
            "/api/v1/users",
            json={"username": "alice", "email": "other@example.com", "password": "password123"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_invalid_is_active_type(self, client):
        response = client.post(
            "/api/v1/users",
            json={
                "username": "alice",
                "email": "alice@example.com",
                "password": "password123",
                "is_active": "sometimes",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


# =============================================================================
# Read
# =============================================================================


class TestGetUser:
    """GET /api/v1/users/{id}, /by-name/{username}."""

    def test_get_by_id(self, client):
        created = create_user(client, "alice")

        response = client.get(f"/api/v1/users/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "alice"

    def test_get_by_id_missing(self, client):
        response = client.get("/api/v1/users/missing-id")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found with ID: missing-id"

    def test_get_by_name(self, client):
        created = create_user(client, "alice")

        response = client.get("/api/v1/users/by-name/alice")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    def test_get_by_name_missing(self, client):
        response = client.get("/api/v1/users/by-name/ghost")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found with username: ghost"


class TestListUsers:
    """GET /api/v1/users."""

    @pytest.fixture
    def seeded(self, client):
        for name, active in [("carol", True), ("alice", True), ("bob", False)]:
            create_user(client, name, is_active=active)
        return client

    def test_list_with_meta(self, seeded):
        body = seeded.get("/api/v1/users").json()

        assert [u["username"] for u in body["data"]] == ["alice", "bob", "carol"]
        assert body["meta"] == {"page": 1, "page_size": 20, "total": 3, "total_pages": 1}

    def test_list_paginated(self, seeded):
        body = seeded.get("/api/v1/users", params={"page": 2, "page_size": 2}).json()

        assert [u["username"] for u in body["data"]] == ["carol"]
        assert body["meta"]["total_pages"] == 2

    def test_list_filtered(self, seeded):
        body = seeded.get("/api/v1/users", params={"filter[is_active]": "false"}).json()

        assert [u["username"] for u in body["data"]] == ["bob"]
        assert body["meta"]["total"] == 1

    def test_list_empty(self, client):
        body = client.get("/api/v1/users").json()

        assert body["data"] == []
        assert body["meta"]["total"] == 0

    def test_huge_page_is_bad_request(self, seeded):
        response = seeded.get("/api/v1/users", params={"page": "100000000000000000000"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"


# =============================================================================
# Update / Delete
# =============================================================================


class TestUpdateUser:
    """PUT /api/v1/users/{id}."""

    def test_update_provided_fields_only(self, client):
        created = create_user(client, "alice", full_name="Alice")

        response = client.put(
            f"/api/v1/users/{created['id']}",
            json={"email": "alice.new@example.com", "is_active": True},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "alice.new@example.com"
        assert data["is_active"] is True
        assert data["full_name"] == "Alice"

    def test_update_password(self, client):
        created = create_user(client, "alice")

        response = client.put(
            f"/api/v1/users/{created['id']}", json={"password": "new-password-123"}
        )

        assert response.status_code == 200
        stored = UserRepository(client.app.state.database).get_user_by_id("default", created["id"])
        assert PasswordHasher().verify(stored.password_hash, "new-password-123")

    def test_short_password_rejected(self, client):
        created = create_user(client, "alice")

        response = client.put(f"/api/v1/users/{created['id']}", json={"password": "short"})

        assert response.status_code == 400
        assert response.json()["fields"]["password"] == "password must be at least 8 characters"

    def test_invalid_email_rejected(self, client):
        created = create_user(client, "alice")

        response = client.put(f"/api/v1/users/{created['id']}", json={"email": "bad"})

        assert response.status_code == 400

    def test_update_missing_user(self, client):
        response = client.put("/api/v1/users/missing-id", json={"email": "x@example.com"})

        assert response.status_code == 404


class TestDeleteUser:
    """DELETE /api/v1/users/{id}."""

    def test_soft_delete(self, client):
        created = create_user(client, "alice", is_active=True)

        response = client.delete(f"/api/v1/users/{created['id']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        fetched = client.get(f"/api/v1/users/{created['id']}").json()["data"]
        assert fetched["is_active"] is False

    def test_delete_missing_user(self, client):
        response = client.delete("/api/v1/users/missing-id")

        assert response.status_code == 404


# =============================================================================
# Auth / Admin / Health
# =============================================================================


class TestAuthStubs:
    """auth 엔드포인트는 stub."""

    @pytest.mark.parametrize("action", ["login", "logout", "refresh"])
    def test_stub_response(self, client, action):
        response = client.post(f"/api/v1/auth/{action}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert "implementation in progress" in data["message"]
        assert data["status"] == "success"


class TestAdmin:
    """admin 엔드포인트."""

    def test_user_stats(self, client):
        create_user(client, "alice", is_active=True)
        create_user(client, "bob")

        response = client.get("/api/v1/admin/users/stats")

        assert response.json()["data"] == {
            "total_users": 2,
            "active_users": 1,
            "inactive_users": 1,
        }

    def test_activate_and_deactivate(self, client):
        created = create_user(client, "alice")

        activated = client.post(f"/api/v1/admin/users/{created['id']}/activate")
        assert activated.status_code == 200
        assert activated.json()["data"] == {"user_id": created["id"], "status": "active"}
        assert activated.json()["message"] == "User activated successfully"
        assert client.get(f"/api/v1/users/{created['id']}").json()["data"]["is_active"] is True

        deactivated = client.post(f"/api/v1/admin/users/{created['id']}/deactivate")
        assert deactivated.json()["data"]["status"] == "inactive"
        assert client.get(f"/api/v1/users/{created['id']}").json()["data"]["is_active"] is False

    def test_activate_missing_user(self, client):
        response = client.post("/api/v1/admin/users/missing-id/activate")

        assert response.status_code == 404


class TestHealth:
    """GET /health."""

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["service"] == "lokstra-web-examples"
        assert body["version"] == "1.0.0"
        assert body["timestamp"]

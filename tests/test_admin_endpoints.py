"""Tests for admin HTTP endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

HIDDEN_KEYS = {"password", "passwordHash", "password_hash", "failedLoginAttempts", "lockedUntil"}


def assert_public(admin: dict) -> None:
    """Check an admin payload exposes camelCase keys and no credentials."""
    assert not HIDDEN_KEYS.intersection(admin)
    assert {"id", "username", "email", "fullName", "role", "permissions", "status"} <= set(admin)
    assert "canManageAdmins" in admin["permissions"]


@pytest.mark.asyncio
class TestLoginEndpoint:
    """Test POST /admin/login."""

    async def test_login_success(self, client: AsyncClient, api: str, super_admin, admin_password):
        """Test login returns a bearer token and the public admin view."""
        response = await client.post(
            f"{api}/login", json={"username": "superadmin", "password": admin_password}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert_public(data["admin"])
        assert data["admin"]["lastLogin"] is not None
        assert response.headers["X-Request-ID"]

    async def test_login_wrong_password(self, client: AsyncClient, api: str, super_admin):
        """Test wrong credentials return 401 with a bearer challenge."""
        response = await client.post(
            f"{api}/login", json={"username": "superadmin", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password."
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_login_missing_fields(self, client: AsyncClient, api: str):
        """Test missing credentials return 400."""
        response = await client.post(f"{api}/login", json={"username": "superadmin"})

        assert response.status_code == 400

    async def test_login_locked(self, client: AsyncClient, api: str, super_admin, admin_password):
        """Test the account locks after five failed logins."""
        for _ in range(5):
            await client.post(f"{api}/login", json={"username": "superadmin", "password": "nope"})

        response = await client.post(
            f"{api}/login", json={"username": "superadmin", "password": admin_password}
        )

        assert response.status_code == 401
        assert "temporarily locked" in response.json()["message"]


@pytest.mark.asyncio
class TestTokenEndpoints:
    """Test endpoints that only need a valid token."""

    async def test_no_token(self, client: AsyncClient, api: str):
        """Test requests without a token are rejected."""
        response = await client.get(f"{api}/profile")

        assert response.status_code == 401
        assert response.json()["message"] == "Access denied. No token provided."

    async def test_garbage_token(self, client: AsyncClient, api: str):
        """Test malformed tokens are rejected."""
        response = await client.get(
            f"{api}/profile", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    async def test_get_profile(self, client: AsyncClient, api: str, event_admin, auth_headers):
        """Test the profile returns the caller."""
        response = await client.get(f"{api}/profile", headers=auth_headers(event_admin))

        assert response.status_code == 200
        admin = response.json()["admin"]
        assert_public(admin)
        assert admin["username"] == "event_admin"

    async def test_verify_token(self, client: AsyncClient, api: str, event_admin, auth_headers):
        """Test a valid token is confirmed with its admin."""
        response = await client.post(f"{api}/verify-token", headers=auth_headers(event_admin))

        assert response.status_code == 200
        assert response.json()["admin"]["id"] == str(event_admin["id"])

    async def test_expired_token(
        self, client: AsyncClient, api: str, event_admin, auth_headers, clock
    ):
        """Test tokens expire after 24 hours."""
        headers = auth_headers(event_admin)
        clock.advance(hours=24, seconds=1)

        response = await client.post(f"{api}/verify-token", headers=headers)

        assert response.status_code == 401

    async def test_update_profile(self, client: AsyncClient, api: str, event_admin, auth_headers):
        """Test the caller can change name and email."""
        response = await client.put(
            f"{api}/profile",
            json={"fullName": "Event Lead", "email": "lead@cem.edu.lk"},
            headers=auth_headers(event_admin),
        )

        assert response.status_code == 200
        admin = response.json()["admin"]
        assert admin["fullName"] == "Event Lead"
        assert admin["email"] == "lead@cem.edu.lk"

    async def test_update_profile_invalid_email(
        self, client: AsyncClient, api: str, event_admin, auth_headers
    ):
        """Test malformed bodies are a 400."""
        response = await client.put(
            f"{api}/profile", json={"email": "nope"}, headers=auth_headers(event_admin)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    async def test_update_profile_email_taken(
        self, client: AsyncClient, api: str, event_admin, super_admin, auth_headers
    ):
        """Test another admin's email is a 400."""
        response = await client.put(
            f"{api}/profile",
            json={"email": super_admin["email"]},
            headers=auth_headers(event_admin),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists."

    async def test_change_password(
        self, client: AsyncClient, api: str, event_admin, auth_headers, admin_password
    ):
        """Test the password can be changed and used to log in."""
        response = await client.put(
            f"{api}/change-password",
            json={"currentPassword": admin_password, "newPassword": "fresh-secret"},
            headers=auth_headers(event_admin),
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password changed successfully."}

        login = await client.post(
            f"{api}/login", json={"username": "event_admin", "password": "fresh-secret"}
        )
        assert login.status_code == 200

    async def test_change_password_wrong_current(
        self, client: AsyncClient, api: str, event_admin, auth_headers, admin_password
    ):
        """Test a wrong current password is a 400 and the old password still works."""
        response = await client.put(
            f"{api}/change-password",
            json={"currentPassword": "wrong", "newPassword": "fresh-secret"},
            headers=auth_headers(event_admin),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect."

        login = await client.post(
            f"{api}/login", json={"username": "event_admin", "password": admin_password}
        )
        assert login.status_code == 200
        rejected = await client.post(
            f"{api}/login", json={"username": "event_admin", "password": "fresh-secret"}
        )
        assert rejected.status_code == 401


@pytest.mark.asyncio
class TestManagementEndpoints:
    """Test endpoints guarded by the manage-admins capability."""

    async def test_register(self, client: AsyncClient, api: str, super_admin, auth_headers):
        """Test a super admin can register a moderator."""
        response = await client.post(
            f"{api}/register",
            json={
                "username": "moderator1",
                "email": "mod@cem.edu.lk",
                "password": "modpass",
                "fullName": "Moderator One",
                "role": "moderator",
            },
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 201
        admin = response.json()["admin"]
        assert_public(admin)
        assert admin["role"] == "moderator"
        assert admin["createdBy"] == str(super_admin["id"])

    async def test_register_forbidden(
        self, client: AsyncClient, api: str, event_admin, auth_headers
    ):
        """Test admins without the capability get 403."""
        response = await client.post(
            f"{api}/register",
            json={
                "username": "moderator1",
                "email": "mod@cem.edu.lk",
                "password": "modpass",
                "fullName": "Moderator One",
            },
            headers=auth_headers(event_admin),
        )

        assert response.status_code == 403

    async def test_register_duplicate(
        self, client: AsyncClient, api: str, super_admin, auth_headers
    ):
        """Test duplicate usernames are a 400."""
        response = await client.post(
            f"{api}/register",
            json={
                "username": "superadmin",
                "email": "other@cem.edu.lk",
                "password": "modpass",
                "fullName": "Copycat",
            },
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Username or email already exists."

    async def test_register_missing_fields(
        self, client: AsyncClient, api: str, super_admin, auth_headers
    ):
        """Test missing fields are a 400."""
        response = await client.post(
            f"{api}/register", json={"username": "lonely"}, headers=auth_headers(super_admin)
        )

        assert response.status_code == 400

    async def test_list(self, client: AsyncClient, api: str, super_admin, manager, auth_headers):
        """Test managers can list admins."""
        response = await client.get(f"{api}/list", headers=auth_headers(manager))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        for admin in data["admins"]:
            assert_public(admin)

    async def test_list_forbidden(self, client: AsyncClient, api: str, event_admin, auth_headers):
        """Test admins without the capability get 403."""
        response = await client.get(f"{api}/list", headers=auth_headers(event_admin))

        assert response.status_code == 403

    async def test_suspend_revokes_access(
        self, client: AsyncClient, api: str, manager, event_admin, auth_headers
    ):
        """Test suspending an admin invalidates their existing token."""
        headers = auth_headers(event_admin)

        response = await client.patch(
            f"{api}/{event_admin['id']}",
            json={"status": "suspended"},
            headers=auth_headers(manager),
        )
        assert response.status_code == 200
        assert response.json()["admin"]["status"] == "suspended"

        profile = await client.get(f"{api}/profile", headers=headers)
        assert profile.status_code == 401

    async def test_update_unknown_admin(
        self, client: AsyncClient, api: str, super_admin, auth_headers
    ):
        """Test editing a missing admin is a 404."""
        response = await client.patch(
            f"{api}/{uuid4()}", json={"status": "inactive"}, headers=auth_headers(super_admin)
        )

        assert response.status_code == 404


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test basic health endpoint."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient):
    """Test the detailed health endpoint pings the database."""
    response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient):
    """Test routing errors use the JSON error body."""
    response = await client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.json()["error"] == "HTTPException"

"""Integration tests for role and permission administration."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from tbsa.modules.users.models import User


pytestmark = pytest.mark.integration


class TestRoles:
    """Tests for listing and creating roles."""

    async def test_list_roles(
        self,
        super_admin_client: AsyncClient,
        admin_user: User,
        owner_user: User,
    ):
        """GET /api/permissions/roles should list roles with user counts."""
        response = await super_admin_client.get("/api/permissions/roles")

        assert response.status_code == 200
        roles = {r["name"]: r for r in response.json()["data"]}
        assert set(roles) == {"ADMINISTRATOR", "OWNER", "SUPER_ADMIN"}
        assert roles["OWNER"]["user_count"] == 1
        assert roles["OWNER"]["is_system"] is True
        assert "apartments:update:own" in roles["OWNER"]["permissions"]

    async def test_list_permission_catalogue(self, super_admin_client: AsyncClient):
        response = await super_admin_client.get("/api/permissions")

        codes = [p["code"] for p in response.json()["data"]]
        assert "buildings:read:all" in codes
        assert "invite_codes:create:building" in codes

    async def test_create_role(self, super_admin_client: AsyncClient):
        """POST /api/permissions/roles should create a custom role."""
        response = await super_admin_client.post(
            "/api/permissions/roles",
            json={
                "name": "CENZOR",
                "description": "Read-only auditor",
                "permissions": ["buildings:read:all", "apartments:read:all"],
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["is_system"] is False
        assert data["permissions"] == ["apartments:read:all", "buildings:read:all"]

    async def test_create_role_with_unknown_permission(self, super_admin_client: AsyncClient):
        response = await super_admin_client.post(
            "/api/permissions/roles",
            json={"name": "CENZOR", "permissions": ["buildings:read:all", "meters:read:all"]},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    async def test_create_duplicate_role(self, super_admin_client: AsyncClient):
        response = await super_admin_client.post(
            "/api/permissions/roles", json={"name": "OWNER"}
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ROLE_EXISTS"

    async def test_administrator_cannot_manage_roles(self, admin_client: AsyncClient):
        response = await admin_client.get("/api/permissions/roles")

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"


class TestRoleAssignment:
    """Tests for PUT /api/permissions/users/{id}/role."""

    async def test_assignment_revokes_sessions(
        self,
        super_admin_client: AsyncClient,
        owner_client: AsyncClient,
        owner_user: User,
        login,
    ):
        """A new role takes effect on the next login; old sessions are ended."""
        response = await super_admin_client.put(
            f"/api/permissions/users/{owner_user.id}/role",
            json={"role": "ADMINISTRATOR"},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {
            "user_id": str(owner_user.id),
            "role": "ADMINISTRATOR",
            "invalidated_sessions": 1,
        }

        stale = await owner_client.get("/api/auth/me")
        assert stale.status_code == 401
        assert stale.json()["code"] == "SESSION_INVALID"

        fresh = await login(owner_user.email)
        me = (await fresh.get("/api/auth/me")).json()["data"]
        assert me["role"] == "ADMINISTRATOR"
        assert "buildings:create:own" in me["permissions"]

    async def test_unknown_role(self, super_admin_client: AsyncClient, owner_user: User):
        response = await super_admin_client.put(
            f"/api/permissions/users/{owner_user.id}/role", json={"role": "PORTAR"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "ROLE_NOT_FOUND"

    async def test_unknown_user(self, super_admin_client: AsyncClient):
        response = await super_admin_client.put(
            f"/api/permissions/users/{uuid4()}/role", json={"role": "OWNER"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    async def test_owner_cannot_assign(self, owner_client: AsyncClient, owner_user: User):
        response = await owner_client.put(
            f"/api/permissions/users/{owner_user.id}/role", json={"role": "SUPER_ADMIN"}
        )

        assert response.status_code == 403
        assert response.json()["details"]["required_permissions"] == [
            "admin_grant:create:all"
        ]


class TestUserListing:
    async def test_super_admin_lists_by_role(
        self,
        super_admin_client: AsyncClient,
        admin_user: User,
        owner_user: User,
    ):
        response = await super_admin_client.get(
            "/api/permissions/users", params={"role": "OWNER"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["email"] == "owner@example.com"

"""
Integration tests for User Management.

Tests cover:
- Listing scoped by role
- Profile visibility (self, admin, cross-organization)
- Creating a profile for a registered account, with optional trial assignment
- Self-service updates and admin-only role changes
- Deletion rules
"""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from conftest import bearer


class TestListUsers:
    @pytest.mark.asyncio
    async def test_admin_lists_own_organization(self, client: AsyncClient, tenants):
        response = await client.get("/api/users", headers=bearer(tenants.admin))
        assert response.status_code == 200
        users = response.json()["users"]
        ids = {u["id"] for u in users}
        assert ids == {str(tenants.admin.id), str(tenants.doctor.id), str(tenants.user.id)}
        assert all(u["organizations"]["name"] == "Acme Research" for u in users)

    @pytest.mark.asyncio
    async def test_non_admin_lists_only_self(self, client: AsyncClient, tenants):
        response = await client.get("/api/users", headers=bearer(tenants.doctor))
        users = response.json()["users"]
        assert [u["id"] for u in users] == [str(tenants.doctor.id)]


class TestGetUser:
    @pytest.mark.asyncio
    async def test_self(self, client: AsyncClient, tenants):
        response = await client.get(f"/api/users/{tenants.user.id}", headers=bearer(tenants.user))
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "user"

    @pytest.mark.asyncio
    async def test_non_admin_cannot_view_others(self, client: AsyncClient, tenants):
        response = await client.get(f"/api/users/{tenants.doctor.id}", headers=bearer(tenants.user))
        assert response.status_code == 403
        assert response.json()["message"] == "You can only view your own profile"

    @pytest.mark.asyncio
    async def test_admin_cannot_view_other_organization(self, client: AsyncClient, tenants):
        response = await client.get(f"/api/users/{tenants.other_admin.id}", headers=bearer(tenants.admin))
        assert response.status_code == 403
        assert response.json()["message"] == "Cannot view users from different organizations"

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient, tenants):
        response = await client.get(f"/api/users/{uuid.uuid4()}", headers=bearer(tenants.admin))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id(self, client: AsyncClient, tenants):
        response = await client.get("/api/users/not-a-uuid", headers=bearer(tenants.admin))
        assert response.status_code == 400


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_admin_attaches_registered_account(self, client: AsyncClient, tenants, identity, datasource):
        account = identity.register("newbie@acme-research.org", "pw-123456", full_name="New Bie")
        response = await client.post(
            "/api/users",
            headers=bearer(tenants.admin),
            json={"email": "newbie@acme-research.org", "role": "doctor", "clinicalTrialId": str(tenants.trial["id"])},
        )
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["id"] == str(account.id)
        assert user["organization_id"] == str(tenants.acme["id"])
        assert user["display_name"] == "New Bie"
        assert user["email"] == "newbie@acme-research.org"
        assert user["trial_assigned"] is True

        assignments = await datasource.select("user_clinical_assignments", filters={"user_id": account.id})
        assert [a["clinical_trial_id"] for a in assignments] == [tenants.trial["id"]]

    @pytest.mark.asyncio
    async def test_without_trial(self, client: AsyncClient, tenants, identity):
        identity.register("plain@acme-research.org", "pw-123456")
        response = await client.post(
            "/api/users",
            headers=bearer(tenants.admin),
            json={"email": "plain@acme-research.org", "role": "user", "displayName": "Plain"},
        )
        assert response.status_code == 201
        assert response.json()["user"]["trial_assigned"] is False
        assert response.json()["user"]["display_name"] == "Plain"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient, tenants):
        response = await client.post("/api/users", headers=bearer(tenants.admin), json={"email": "x@acme-research.org"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and role are required"

    @pytest.mark.asyncio
    async def test_invalid_role(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/users", headers=bearer(tenants.admin), json={"email": "x@acme-research.org", "role": "owner"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid role. Must be: admin, user, or doctor"

    @pytest.mark.asyncio
    async def test_non_admin_refused(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/users", headers=bearer(tenants.doctor), json={"email": "x@acme-research.org", "role": "user"}
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Only admins can create users"

    @pytest.mark.asyncio
    async def test_unregistered_account(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/users", headers=bearer(tenants.admin), json={"email": "stranger@acme-research.org", "role": "user"}
        )
        assert response.status_code == 400
        assert response.json()["message"].startswith("User must be registered in the system first")

    @pytest.mark.asyncio
    async def test_existing_profile(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/users", headers=bearer(tenants.admin), json={"email": tenants.other_admin.email, "role": "user"}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Failed to create user profile"
        assert data["error"] == "User profile already exists"

    @pytest.mark.asyncio
    async def test_trial_from_other_organization(self, client: AsyncClient, tenants, identity):
        identity.register("spy@acme-research.org", "pw-123456")
        response = await client.post(
            "/api/users",
            headers=bearer(tenants.admin),
            json={"email": "spy@acme-research.org", "role": "user", "clinicalTrialId": str(tenants.foreign_trial["id"])},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Clinical trial not found in your organization"


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_self_display_name(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.user.id}", headers=bearer(tenants.user), json={"displayName": "Uma U."}
        )
        assert response.status_code == 200
        assert response.json()["user"]["display_name"] == "Uma U."

    @pytest.mark.asyncio
    async def test_non_admin_role_change_of_other_user(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.doctor.id}", headers=bearer(tenants.user), json={"role": "admin"}
        )
        assert response.status_code == 403
        assert response.json()["message"] == "You can only update your own profile"

    @pytest.mark.asyncio
    async def test_non_admin_own_role_change(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.user.id}", headers=bearer(tenants.user), json={"role": "admin"}
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Only admins can change user roles"

    @pytest.mark.asyncio
    async def test_admin_changes_role(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.user.id}", headers=bearer(tenants.admin), json={"role": "doctor"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "doctor"

    @pytest.mark.asyncio
    async def test_admin_invalid_role(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.user.id}", headers=bearer(tenants.admin), json={"role": "root"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_cannot_update_other_organization(self, client: AsyncClient, tenants):
        response = await client.put(
            f"/api/users/{tenants.other_admin.id}", headers=bearer(tenants.admin), json={"displayName": "x"}
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Cannot update users from different organizations"


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, client: AsyncClient, tenants):
        response = await client.delete(f"/api/users/{tenants.admin.id}", headers=bearer(tenants.admin))
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete your own account"

    @pytest.mark.asyncio
    async def test_non_admin_refused(self, client: AsyncClient, tenants):
        response = await client.delete(f"/api/users/{tenants.doctor.id}", headers=bearer(tenants.user))
        assert response.status_code == 403
        assert response.json()["message"] == "Only admins can delete users"

    @pytest.mark.asyncio
    async def test_admin_deletes_member(self, client: AsyncClient, tenants, datasource):
        response = await client.delete(f"/api/users/{tenants.doctor.id}", headers=bearer(tenants.admin))
        assert response.status_code == 200
        assert await datasource.fetch_one("profiles", {"id": tenants.doctor.id}) is None
        assert await datasource.count("user_clinical_assignments", filters={"user_id": tenants.doctor.id}) == 0

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_other_organization(self, client: AsyncClient, tenants):
        response = await client.delete(f"/api/users/{tenants.other_admin.id}", headers=bearer(tenants.admin))
        assert response.status_code == 403

"""
Tests for the admin bootstrap script and the demo tenant.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from clinical_portal.core.demo import DEMO_PASSWORD, DEMO_USERS, HOSPITALS, SETTINGS, seed_demo_data
from clinical_portal.scripts.create_local_admin import create_admin


class TestCreateAdmin:
    @pytest.mark.asyncio
    async def test_registers_account_and_organization(self, datasource, identity):
        profile = await create_admin(
            datasource, identity, "founder@initech.com", "Initech", password="pw-123456", display_name="Founder"
        )
        org = await datasource.fetch_one("organizations", {"name": "Initech"})
        assert profile["organization_id"] == org["id"]
        assert profile["role"] == "admin"
        assert profile["display_name"] == "Founder"
        assert (await identity.find_user_by_email("founder@initech.com")).id == profile["id"]

    @pytest.mark.asyncio
    async def test_existing_account_without_profile(self, datasource, identity):
        account = identity.register("founder@initech.com", "pw")
        profile = await create_admin(datasource, identity, "founder@initech.com", "Initech")
        assert profile["id"] == account.id
        assert profile["display_name"] == "founder"

    @pytest.mark.asyncio
    async def test_promotes_existing_member(self, datasource, identity, tenants):
        profile = await create_admin(datasource, identity, tenants.doctor.email, "Acme Research")
        assert profile["role"] == "admin"
        assert await datasource.count("organizations") == 2

    @pytest.mark.asyncio
    async def test_already_admin_is_unchanged(self, datasource, identity, tenants):
        profile = await create_admin(datasource, identity, tenants.admin.email, "Acme Research")
        assert profile["role"] == "admin"
        assert profile["display_name"] == "Ada Admin"

    @pytest.mark.asyncio
    async def test_missing_account_needs_password(self, datasource, identity):
        with pytest.raises(SystemExit):
            await create_admin(datasource, identity, "ghost@initech.com", "Initech")

    @pytest.mark.asyncio
    async def test_member_of_other_organization(self, datasource, identity, tenants):
        with pytest.raises(SystemExit):
            await create_admin(datasource, identity, tenants.other_admin.email, "Acme Research")


# ---------------------------------------------------------------------------
# Demo tenant
# ---------------------------------------------------------------------------

class TestDemoSeed:
    @pytest.mark.asyncio
    async def test_seed_contents(self, datasource, identity):
        seed_demo_data(datasource, identity)
        assert await datasource.count("profiles") == len(DEMO_USERS)
        assert await datasource.count("hospitals") == len(HOSPITALS)
        assert await datasource.count("app_settings") == len(SETTINGS)
        assert await datasource.count("user_clinical_assignments") == 2
        assert await datasource.count("user_analytics") == len(DEMO_USERS)

    @pytest.mark.asyncio
    async def test_demo_admin_can_sign_in(self, client: AsyncClient, datasource, identity):
        seed_demo_data(datasource, identity)
        email = DEMO_USERS[0][0]
        login = await client.post("/api/auth/login", json={"email": email, "password": DEMO_PASSWORD})
        assert login.status_code == 200

        token = login.json()["token"]
        dashboard = await client.get("/api/dashboard", headers={"Authorization": f"Bearer {token}"})
        stats = dashboard.json()["stats"]
        assert stats["userRole"] == "admin"
        assert stats["totalTrials"] == 1
        assert stats["totalEnrollments"] == 1

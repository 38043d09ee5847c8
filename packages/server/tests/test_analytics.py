"""
Tests for usage analytics and dashboard statistics.
"""

from __future__ import annotations

import datetime as dt

import pytest
from httpx import AsyncClient

from clinical_portal.services.analytics import DEFAULT_SITE, most_viewed_tab
from conftest import bearer


class TestMostViewedTab:
    def test_highest_count_wins(self):
        assert most_viewed_tab({"home": 3, "news": 7, "docs": 1}) == "news"

    def test_tie_goes_to_later_tab(self):
        assert most_viewed_tab({"home": 5, "news": 5}) == "news"

    def test_empty(self):
        assert most_viewed_tab({}) is None


class TestTrack:
    @pytest.mark.asyncio
    async def test_first_open_creates_row(self, client: AsyncClient, tenants):
        response = await client.post("/api/analytics/track", headers=bearer(tenants.user), json={"tabViewed": "news"})
        assert response.status_code == 200
        row = response.json()["analytics"]
        assert row["user_id"] == str(tenants.user.id)
        assert row["user_name"] == "Uma User"
        assert row["user_email"] == tenants.user.email
        assert row["site"] == DEFAULT_SITE
        assert row["total_app_opens"] == 1
        assert row["tab_views"] == {"news": 1}
        assert row["most_viewed_tab"] == "news"

    @pytest.mark.asyncio
    async def test_repeat_opens_accumulate(self, client: AsyncClient, tenants):
        headers = bearer(tenants.user)
        for tab in ("home", "news", "news", None):
            await client.post("/api/analytics/track", headers=headers, json={"tabViewed": tab})
        response = await client.post("/api/analytics/track", headers=headers, json={})
        row = response.json()["analytics"]
        assert row["total_app_opens"] == 5
        assert row["tab_views"] == {"home": 1, "news": 2}
        assert row["most_viewed_tab"] == "news"

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.post("/api/analytics/track", json={"tabViewed": "news"})
        assert response.status_code == 401


class TestListAnalytics:
    @pytest.mark.asyncio
    async def test_admin_sees_everyone_non_admin_sees_self(self, client: AsyncClient, tenants):
        await client.post("/api/analytics/track", headers=bearer(tenants.user), json={})
        await client.post("/api/analytics/track", headers=bearer(tenants.doctor), json={})
        await client.post("/api/analytics/track", headers=bearer(tenants.doctor), json={})

        as_admin = await client.get("/api/analytics", headers=bearer(tenants.admin))
        rows = as_admin.json()["analytics"]
        assert [r["user_id"] for r in rows] == [str(tenants.doctor.id), str(tenants.user.id)]

        as_user = await client.get("/api/analytics", headers=bearer(tenants.user))
        assert [r["user_id"] for r in as_user.json()["analytics"]] == [str(tenants.user.id)]


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

class TestDashboard:
    @pytest.mark.asyncio
    async def test_admin_stats(self, client: AsyncClient, tenants, datasource):
        datasource.add(
            "enrollments",
            {
                "organization_id": tenants.acme["id"],
                "clinical_trial_id": tenants.trial["id"],
                "participant_name": "P1",
                "enrollment_date": dt.date(2025, 2, 1),
            },
        )
        datasource.add(
            "news_updates",
            {
                "organization_id": tenants.globex["id"],
                "clinical_trial_id": tenants.foreign_trial["id"],
                "title": "Other org",
                "body": "...",
            },
        )
        response = await client.get("/api/dashboard", headers=bearer(tenants.admin))
        assert response.status_code == 200
        assert response.json()["stats"] == {
            "totalUsers": 3,
            "totalTrials": 2,
            "activeTrials": 1,
            "totalEnrollments": 1,
            "totalNewsUpdates": 0,
            "totalTrainingMaterials": 0,
            "totalStudyProtocols": 0,
            "accessibleTrials": 2,
            "userRole": "admin",
        }

    @pytest.mark.asyncio
    async def test_user_sees_own_accessible_count(self, client: AsyncClient, tenants):
        response = await client.get("/api/dashboard", headers=bearer(tenants.user))
        stats = response.json()["stats"]
        assert stats["accessibleTrials"] == 1
        assert stats["userRole"] == "user"
        assert stats["totalUsers"] == 3

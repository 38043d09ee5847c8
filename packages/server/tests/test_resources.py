"""
Integration tests for the shared resources: hospitals, portal news, PDF
documents and clients.
"""

from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from clinical_portal.services.hospitals import consent_rate, reshape, summarize
from conftest import bearer


# ---------------------------------------------------------------------------
# Hospitals
# ---------------------------------------------------------------------------

class TestHospitalHelpers:
    def test_consent_rate(self):
        assert consent_rate(200, 150) == 75.0
        assert consent_rate(3, 1) == 33.33
        assert consent_rate(0, 0) is None

    def test_reshape_reads_legacy_columns(self):
        row = {
            "id": uuid.uuid4(),
            "hospitalName": "Old Import",
            "location": "Boston, MA",
            "principalInvestigator": "Dr. Legacy",
            "consentedPatients": 10,
            "randomizedPatients": 5,
            "consentRate": 50.0,
        }
        hospital = reshape(row)
        assert hospital["name"] == "Old Import"
        assert hospital["principal_investigator"] == "Dr. Legacy"
        assert hospital["consented_patients"] == 10
        assert hospital["consent_rate"] == 50.0

    def test_summarize(self):
        hospitals = [
            {"consented_patients": 10, "randomized_patients": 4},
            {"consented_patients": None, "randomized_patients": 6},
        ]
        assert summarize(hospitals) == {"totalConsented": 10, "totalRandomized": 10, "totalHospitals": 2}


class TestHospitals:
    @staticmethod
    def _seed(datasource):
        datasource.add(
            "hospitals",
            {"hospital_name": "Small Site", "location": "A", "principal_investigator": "Dr. A",
             "consented_patients": 20, "randomized_patients": 10},
        )
        datasource.add(
            "hospitals",
            {"hospital_name": "Big Site", "location": "B", "principal_investigator": "Dr. B",
             "consented_patients": 100, "randomized_patients": 90},
        )

    @pytest.mark.asyncio
    async def test_list_ranked_with_summary(self, client: AsyncClient, tenants, datasource):
        self._seed(datasource)
        response = await client.get("/api/hospitals", headers=bearer(tenants.user))
        assert response.status_code == 200
        data = response.json()
        assert [h["name"] for h in data["hospitals"]] == ["Big Site", "Small Site"]
        assert data["summary"] == {"totalConsented": 120, "totalRandomized": 100, "totalHospitals": 2}

    @pytest.mark.asyncio
    async def test_list_requires_token(self, client: AsyncClient):
        response = await client.get("/api/hospitals")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_creates_with_derived_rate(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/hospitals",
            headers=bearer(tenants.admin),
            json={
                "name": "North Clinic",
                "location": "Denver, CO",
                "principalInvestigator": "Dr. North",
                "consentedPatients": 200,
                "randomizedPatients": 150,
            },
        )
        assert response.status_code == 201
        hospital = response.json()["hospital"]
        assert hospital["consent_rate"] == 75.0

        fetched = await client.get(f"/api/hospitals/{hospital['id']}", headers=bearer(tenants.user))
        assert fetched.json()["hospital"] == hospital

    @pytest.mark.asyncio
    async def test_create_requires_fields(self, client: AsyncClient, tenants):
        response = await client.post("/api/hospitals", headers=bearer(tenants.admin), json={"name": "X"})
        assert response.status_code == 400
        assert response.json()["message"] == "Name, location, and principal investigator are required"

    @pytest.mark.asyncio
    async def test_non_admin_cannot_create(self, client: AsyncClient, tenants, datasource):
        response = await client.post(
            "/api/hospitals",
            headers=bearer(tenants.doctor),
            json={"name": "X", "location": "Y", "principalInvestigator": "Z"},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Only admins can manage hospitals"
        assert await datasource.count("hospitals") == 0

    @pytest.mark.asyncio
    async def test_update_recomputes_rate(self, client: AsyncClient, tenants, datasource):
        row = datasource.add(
            "hospitals",
            {"hospital_name": "Site", "location": "A", "principal_investigator": "Dr. A",
             "consented_patients": 10, "randomized_patients": 5, "consented_rate": 50.0},
        )
        response = await client.put(
            f"/api/hospitals/{row['id']}", headers=bearer(tenants.admin), json={"randomizedPatients": 8}
        )
        assert response.status_code == 200
        hospital = response.json()["hospital"]
        assert hospital["randomized_patients"] == 8
        assert hospital["consent_rate"] == 80.0

    @pytest.mark.asyncio
    async def test_create_rejects_more_randomized_than_consented(self, client: AsyncClient, tenants, datasource):
        response = await client.post(
            "/api/hospitals",
            headers=bearer(tenants.admin),
            json={
                "name": "South Clinic",
                "location": "Austin, TX",
                "principalInvestigator": "Dr. South",
                "consentedPatients": 1,
                "randomizedPatients": 5000,
            },
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Randomized patients cannot exceed consented patients"
        assert await datasource.count("hospitals") == 0

    @pytest.mark.asyncio
    async def test_update_rejects_more_randomized_than_consented(self, client: AsyncClient, tenants, datasource):
        row = datasource.add(
            "hospitals",
            {"hospital_name": "Site", "location": "A", "principal_investigator": "Dr. A",
             "consented_patients": 10, "randomized_patients": 5, "consented_rate": 50.0},
        )
        response = await client.put(
            f"/api/hospitals/{row['id']}", headers=bearer(tenants.admin), json={"consentedPatients": 4}
        )
        assert response.status_code == 400
        stored = await datasource.fetch_one("hospitals", {"id": row["id"]})
        assert stored["consented_patients"] == 10
        assert stored["consented_rate"] == 50.0

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, tenants, datasource):
        row = datasource.add(
            "hospitals", {"hospital_name": "Site", "location": "A", "principal_investigator": "Dr. A"}
        )
        response = await client.delete(f"/api/hospitals/{row['id']}", headers=bearer(tenants.admin))
        assert response.status_code == 200
        missing = await client.get(f"/api/hospitals/{row['id']}", headers=bearer(tenants.admin))
        assert missing.status_code == 404
        assert missing.json()["message"] == "Hospital not found"


# ---------------------------------------------------------------------------
# Portal news
# ---------------------------------------------------------------------------

class TestNews:
    @pytest.mark.asyncio
    async def test_publish_and_list(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/news", headers=bearer(tenants.admin), json={"title": "Kickoff", "content": "Welcome all"}
        )
        assert response.status_code == 201
        item = response.json()["newsItem"]
        assert item["title"] == "Kickoff"
        assert item["content"] == "Welcome all"
        assert item["created_by_name"] == "Ada Admin"
        assert item["is_active"] is True

        listed = await client.get("/api/news", headers=bearer(tenants.user))
        assert [n["title"] for n in listed.json()["newsItems"]] == ["Kickoff"]

    @pytest.mark.asyncio
    async def test_deactivated_items_hidden(self, client: AsyncClient, tenants, datasource):
        row = datasource.add("news", {"news_title": "Old", "news_content": "..."})
        response = await client.put(
            f"/api/news/{row['id']}", headers=bearer(tenants.admin), json={"isActive": False}
        )
        assert response.status_code == 200
        listed = await client.get("/api/news", headers=bearer(tenants.user))
        assert listed.json()["newsItems"] == []

    @pytest.mark.asyncio
    async def test_requires_title_and_content(self, client: AsyncClient, tenants):
        response = await client.post("/api/news", headers=bearer(tenants.admin), json={"title": "Only title"})
        assert response.status_code == 400
        assert response.json()["message"] == "Title and content are required"

    @pytest.mark.asyncio
    async def test_non_admin_cannot_publish(self, client: AsyncClient, tenants):
        response = await client.post("/api/news", headers=bearer(tenants.user), json={"title": "t", "content": "c"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient, tenants):
        response = await client.delete(f"/api/news/{uuid.uuid4()}", headers=bearer(tenants.admin))
        assert response.status_code == 404
        assert response.json()["message"] == "News item not found"


# ---------------------------------------------------------------------------
# PDF documents
# ---------------------------------------------------------------------------

class TestPdfs:
    @pytest.mark.asyncio
    async def test_create_list_delete(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/pdfs",
            headers=bearer(tenants.doctor),
            json={"title": "Consent form", "category": "forms", "fileUrl": "https://cdn.test/consent.pdf"},
        )
        assert response.status_code == 201
        document = response.json()["pdfDocument"]
        assert document["uploaded_by"] == str(tenants.doctor.id)
        assert document["uploaded_by_name"] == "Dr. Dana"

        listed = await client.get("/api/pdfs", headers=bearer(tenants.user))
        assert [d["title"] for d in listed.json()["pdfDocuments"]] == ["Consent form"]

        refused = await client.delete(f"/api/pdfs/{document['id']}", headers=bearer(tenants.user))
        assert refused.status_code == 403

        deleted = await client.delete(f"/api/pdfs/{document['id']}", headers=bearer(tenants.admin))
        assert deleted.status_code == 200

    @pytest.mark.asyncio
    async def test_title_required(self, client: AsyncClient, tenants):
        response = await client.post("/api/pdfs", headers=bearer(tenants.doctor), json={"category": "forms"})
        assert response.status_code == 400
        assert response.json()["message"] == "Title is required"


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class TestClients:
    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, tenants):
        created = await client.post(
            "/api/clients",
            headers=bearer(tenants.admin),
            json={"name": "Initech", "email": "Contact@Initech.com", "company": "Initech"},
        )
        assert created.status_code == 201
        record = created.json()["client"]
        assert record["email"] == "contact@initech.com"
        assert record["status"] == "active"

        updated = await client.put(
            f"/api/clients/{record['id']}", headers=bearer(tenants.admin), json={"status": "inactive"}
        )
        assert updated.json()["client"]["status"] == "inactive"

        fetched = await client.get(f"/api/clients/{record['id']}", headers=bearer(tenants.user))
        assert fetched.json()["client"]["name"] == "Initech"

        deleted = await client.delete(f"/api/clients/{record['id']}", headers=bearer(tenants.admin))
        assert deleted.status_code == 200
        missing = await client.get(f"/api/clients/{record['id']}", headers=bearer(tenants.admin))
        assert missing.status_code == 404
        assert missing.json()["message"] == "Client not found"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient, tenants):
        body = {"name": "Initech", "email": "contact@initech.com"}
        first = await client.post("/api/clients", headers=bearer(tenants.admin), json=body)
        assert first.status_code == 201
        second = await client.post("/api/clients", headers=bearer(tenants.admin), json=body)
        assert second.status_code == 400
        assert second.json()["message"] == "Failed to create client"

    @pytest.mark.asyncio
    async def test_requires_name_and_email(self, client: AsyncClient, tenants):
        response = await client.post("/api/clients", headers=bearer(tenants.admin), json={"name": "Initech"})
        assert response.status_code == 400
        assert response.json()["message"] == "Name and email are required"

    @pytest.mark.asyncio
    async def test_invalid_status(self, client: AsyncClient, tenants):
        response = await client.post(
            "/api/clients",
            headers=bearer(tenants.admin),
            json={"name": "Initech", "email": "a@initech.com", "status": "archived"},
        )
        assert response.status_code == 400

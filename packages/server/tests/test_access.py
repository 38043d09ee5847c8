"""
Tests that write endpoints refuse callers without a valid session token and
leave every table untouched.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import SQLModel

from clinical_portal.core.auth import create_session_token


@pytest.fixture
def rows(datasource, tenants) -> dict[str, str]:
    """One row of every mutable resource, keyed by the placeholder used in paths."""
    scoped = {"organization_id": tenants.acme["id"], "clinical_trial_id": tenants.trial["id"]}
    enrollment = datasource.add(
        "enrollments", {**scoped, "participant_name": "P-001", "enrollment_date": date(2025, 3, 1)}
    )
    news_update = datasource.add("news_updates", {**scoped, "title": "Update", "body": "..."})
    material = datasource.add("training_materials", {**scoped, "title": "Deck"})
    protocol = datasource.add("study_protocols", {**scoped, "title": "Protocol", "version": "1.0"})
    hospital = datasource.add(
        "hospitals", {"hospital_name": "City General", "location": "NY", "principal_investigator": "Dr. J"}
    )
    news = datasource.add("news", {"news_title": "Hello", "news_content": "World"})
    client_row = datasource.add("clients", {"name": "Client", "email": "client@initech.com"})
    pdf = datasource.add("pdf_documents", {"title": "Protocol PDF"})
    datasource.add("app_settings", {"setting_key": "company_name", "setting_value": "Acme"})
    return {
        "user": str(tenants.user.id),
        "trial": str(tenants.trial["id"]),
        "enrollment": str(enrollment["id"]),
        "news_update": str(news_update["id"]),
        "material": str(material["id"]),
        "protocol": str(protocol["id"]),
        "hospital": str(hospital["id"]),
        "news": str(news["id"]),
        "client": str(client_row["id"]),
        "pdf": str(pdf["id"]),
    }


def snapshot(datasource) -> dict[str, list]:
    return {table: datasource.all(table) for table in SQLModel.metadata.tables}


WRITES = [
    ("POST", "/api/users", {"email": "new@acme-research.org", "role": "user"}),
    ("PUT", "/api/users/{user}", {"displayName": "Renamed", "role": "admin"}),
    ("DELETE", "/api/users/{user}", None),
    ("POST", "/api/clinical-trials", {"name": "New Study"}),
    ("PUT", "/api/clinical-trials/{trial}", {"name": "Renamed Study"}),
    ("DELETE", "/api/clinical-trials/{trial}", None),
    ("POST", "/api/clinical-trials/{trial}/assignments", {"userId": "{user}"}),
    ("DELETE", "/api/clinical-trials/{trial}/assignments/{user}", None),
    (
        "POST",
        "/api/enrollments",
        {"clinicalTrialId": "{trial}", "participantName": "P-002", "enrollmentDate": "2025-03-02"},
    ),
    ("PUT", "/api/enrollments/{enrollment}", {"participantName": "P-003"}),
    ("DELETE", "/api/enrollments/{enrollment}", None),
    ("POST", "/api/news-updates", {"clinicalTrialId": "{trial}", "title": "T", "body": "B"}),
    ("PUT", "/api/news-updates/{news_update}", {"title": "Changed"}),
    ("DELETE", "/api/news-updates/{news_update}", None),
    ("POST", "/api/training-materials", {"clinicalTrialId": "{trial}", "title": "Deck 2"}),
    ("PUT", "/api/training-materials/{material}", {"title": "Changed"}),
    ("DELETE", "/api/training-materials/{material}", None),
    ("POST", "/api/study-protocols", {"clinicalTrialId": "{trial}", "title": "Protocol 2"}),
    ("PUT", "/api/study-protocols/{protocol}", {"version": "2.0"}),
    ("DELETE", "/api/study-protocols/{protocol}", None),
    (
        "POST",
        "/api/hospitals",
        {"name": "Metro", "location": "LA", "principalInvestigator": "Dr. S"},
    ),
    ("PUT", "/api/hospitals/{hospital}", {"location": "Boston"}),
    ("DELETE", "/api/hospitals/{hospital}", None),
    ("POST", "/api/news", {"title": "Breaking", "content": "News"}),
    ("PUT", "/api/news/{news}", {"title": "Changed"}),
    ("DELETE", "/api/news/{news}", None),
    ("PUT", "/api/settings/company_name", {"value": "Hijacked"}),
    ("POST", "/api/clients", {"name": "Other", "email": "other@initech.com"}),
    ("PUT", "/api/clients/{client}", {"name": "Changed"}),
    ("DELETE", "/api/clients/{client}", None),
    ("POST", "/api/pdfs", {"title": "Consent form", "fileUrl": "/pdfs/consent.pdf"}),
    ("DELETE", "/api/pdfs/{pdf}", None),
    ("POST", "/api/files", {"clinicalTrialId": "{trial}", "bucket": "docs", "path": "a/b.pdf", "fileName": "b.pdf"}),
    ("POST", "/api/analytics/track", {"tabViewed": "news"}),
]


def _fill(value, ids: dict[str, str]):
    if isinstance(value, str):
        return value.format(**ids)
    if isinstance(value, dict):
        return {key: _fill(item, ids) for key, item in value.items()}
    return value


def expired_token(member) -> dict[str, str]:
    token, _ = create_session_token(member.id, member.email, expires_delta=timedelta(seconds=-5))
    return {"Authorization": f"Bearer {token}"}


class TestWritesRequireSession:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,body", WRITES)
    async def test_without_token(self, client: AsyncClient, datasource, rows, method, path, body):
        before = snapshot(datasource)
        response = await client.request(method, _fill(path, rows), json=_fill(body, rows))
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}
        assert snapshot(datasource) == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,body", WRITES)
    async def test_with_expired_token(self, client: AsyncClient, datasource, tenants, rows, method, path, body):
        before = snapshot(datasource)
        response = await client.request(
            method, _fill(path, rows), json=_fill(body, rows), headers=expired_token(tenants.admin)
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"
        assert snapshot(datasource) == before

"""
Health check, root and fallback endpoint tests.
"""

import pytest
from httpx import AsyncClient

from clinical_portal.core.middleware import SECURITY_HEADERS


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint reports OK with a timestamp and uptime."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert "timestamp" in data
    assert data["uptime"] >= 0


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Client Portal Backend API"
    assert data["status"] == "running"
    assert data["version"]


@pytest.mark.asyncio
async def test_unknown_route_returns_envelope(client: AsyncClient):
    response = await client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Endpoint not found"}


@pytest.mark.asyncio
async def test_security_headers_present(client: AsyncClient):
    response = await client.get("/health")
    for header, value in SECURITY_HEADERS.items():
        assert response.headers[header] == value
    assert "Strict-Transport-Security" not in response.headers


@pytest.mark.asyncio
async def test_docs_skip_content_security_policy(client: AsyncClient):
    response = await client.get("/openapi.json")
    assert response.status_code == 200
    assert "Content-Security-Policy" not in response.headers
    assert response.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,method,schema",
    [
        ("/api/users", "get", "UserListResponse"),
        ("/api/users/{userId}", "get", "UserResponse"),
        ("/api/clinical-trials", "get", "TrialListResponse"),
        ("/api/enrollments", "get", "EnrollmentListResponse"),
        ("/api/hospitals", "get", "HospitalListResponse"),
        ("/api/hospitals/{hospitalId}", "get", "HospitalResponse"),
        ("/api/news", "get", "NewsListResponse"),
        ("/api/clients/{clientId}", "delete", "MessageResponse"),
        ("/api/settings", "get", "SettingsResponse"),
        ("/api/dashboard", "get", "DashboardResponse"),
    ],
)
async def test_openapi_documents_response_envelopes(client: AsyncClient, path, method, schema):
    document = (await client.get("/openapi.json")).json()
    content = document["paths"][path][method]["responses"]["200"]["content"]["application/json"]
    assert content["schema"]["$ref"] == f"#/components/schemas/{schema}"

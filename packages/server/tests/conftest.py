"""
Shared fixtures.

The app runs on the in-memory backend. Each test gets a fresh data source and
identity provider holding two organizations:

- ``acme``: an admin, a doctor and a user; the doctor and user are assigned to
  ``trial``, nobody is assigned to ``closed_trial``
- ``globex``: one admin and ``foreign_trial``
"""

from __future__ import annotations

import os

os.environ["PORTAL_DATA_SOURCE"] = "mock"
os.environ["PORTAL_SEED_DEMO_DATA"] = "false"
os.environ["PORTAL_SECRET_KEY"] = "test-secret-key-with-enough-entropy-0123456789"
os.environ.pop("PORTAL_REDIS_URL", None)

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from clinical_portal.core.auth import create_session_token
from clinical_portal.core.backends import get_datasource, get_identity_provider
from clinical_portal.core.identity import MockIdentityProvider
from clinical_portal.core.mock_datasource import MockDataSource
from clinical_portal.core.policy import Caller
from clinical_portal.main import app

PASSWORD = "correct-horse-battery"


@pytest.fixture
def datasource() -> MockDataSource:
    return MockDataSource()


@pytest.fixture
def identity() -> MockIdentityProvider:
    return MockIdentityProvider()


def _member(datasource, identity, org, email, role, name):
    account = identity.register(email, PASSWORD, full_name=name)
    profile = datasource.add(
        "profiles",
        {"id": account.id, "organization_id": org["id"], "role": role, "display_name": name},
    )
    return SimpleNamespace(id=account.id, email=email, role=role, name=name, profile=profile)


@pytest.fixture
def tenants(datasource, identity) -> SimpleNamespace:
    acme = datasource.add("organizations", {"name": "Acme Research"})
    globex = datasource.add("organizations", {"name": "Globex Clinical"})

    admin = _member(datasource, identity, acme, "admin@acme-research.org", "admin", "Ada Admin")
    doctor = _member(datasource, identity, acme, "doctor@acme-research.org", "doctor", "Dr. Dana")
    user = _member(datasource, identity, acme, "user@acme-research.org", "user", "Uma User")
    other_admin = _member(datasource, identity, globex, "admin@globex-clinical.org", "admin", "Gil Globex")

    trial = datasource.add(
        "clinical_trials",
        {"organization_id": acme["id"], "name": "Cardio Study", "created_by": admin.id},
    )
    closed_trial = datasource.add(
        "clinical_trials",
        {"organization_id": acme["id"], "name": "Archived Study", "is_active": False, "created_by": admin.id},
    )
    foreign_trial = datasource.add(
        "clinical_trials",
        {"organization_id": globex["id"], "name": "Globex Study", "created_by": other_admin.id},
    )
    for member in (doctor, user):
        datasource.add(
            "user_clinical_assignments",
            {"user_id": member.id, "clinical_trial_id": trial["id"], "organization_id": acme["id"]},
        )

    return SimpleNamespace(
        acme=acme,
        globex=globex,
        admin=admin,
        doctor=doctor,
        user=user,
        other_admin=other_admin,
        trial=trial,
        closed_trial=closed_trial,
        foreign_trial=foreign_trial,
    )


@pytest.fixture
async def client(datasource, identity):
    async def _datasource():
        yield datasource

    app.dependency_overrides[get_datasource] = _datasource
    app.dependency_overrides[get_identity_provider] = lambda: identity
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(member) -> dict[str, str]:
    """Authorization header carrying a fresh session token for ``member``."""
    token, _ = create_session_token(member.id, member.email, {"full_name": member.name})
    return {"Authorization": f"Bearer {token}"}


def caller_for(member, tenants) -> Caller:
    org = tenants.globex if member is tenants.other_admin else tenants.acme
    return Caller(
        user_id=member.id,
        organization_id=org["id"],
        role=member.role,
        email=member.email,
        display_name=member.name,
    )

"""
Authentication API endpoints.

POST /api/auth/login      Exchange email + password for a session token
POST /api/auth/register   Create an identity provider account
POST /api/auth/logout     Revoke the session token (and provider session)
GET  /api/auth/verify     Return the verified token claims
GET  /api/user/profile    The caller's profile, organization and account details
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_session_claims
from clinical_portal.core.backends import get_datasource, get_identity_provider
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.identity import IdentityProvider
from clinical_portal.services import auth as auth_service
from clinical_portal_shared.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    ProfileResponse,
    RegisterRequest,
    VerifyResponse,
)

router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse, tags=["Authentication"])
async def login(
    body: LoginRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Sign in with the identity provider and receive a 24h session token."""
    return await auth_service.login(body, identity)


@router.post("/auth/register", tags=["Authentication"])
async def register(
    body: RegisterRequest,
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Create an account. A profile is attached later by an organization admin."""
    return await auth_service.register(body, identity)


@router.post("/auth/logout", tags=["Authentication"])
async def logout(
    body: Optional[LogoutRequest] = None,
    claims: dict = Depends(get_session_claims),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    return await auth_service.logout(claims, body or LogoutRequest(), identity)


@router.get("/auth/verify", response_model=VerifyResponse, tags=["Authentication"])
async def verify(claims: dict = Depends(get_session_claims)):
    """Check a session token and echo its claims."""
    return {"success": True, "user": claims}


@router.get("/user/profile", response_model=ProfileResponse, tags=["Authentication"])
async def get_profile(
    claims: dict = Depends(get_session_claims),
    datasource: DataSource = Depends(get_datasource),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    return await auth_service.get_profile(claims, datasource, identity)

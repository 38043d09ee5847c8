"""
Authentication service: login, registration, logout and the caller's own profile.
"""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.auth import create_session_token, remaining_lifetime, revoke_session_token
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.errors import IdentityProviderError, PortalError, downstream
from clinical_portal.core.identity import IdentityProvider, IdentityUser
from clinical_portal_shared.schemas.auth import LoginRequest, LogoutRequest, RegisterRequest

log = structlog.get_logger()


def _display_name(user: IdentityUser) -> str | None:
    return user.user_metadata.get("full_name") or user.email


async def login(req: LoginRequest, identity: IdentityProvider) -> dict:
    """Verify credentials with the identity provider and issue a session token."""
    if not req.email or not req.password:
        raise PortalError(400, "Email and password are required")

    try:
        session = await identity.sign_in_with_password(req.email, req.password)
    except IdentityProviderError as exc:
        if exc.status_code >= 500:
            raise
        log.info("auth.login_failure", email=req.email, reason=exc.message)
        raise PortalError(401, "Invalid credentials", error=exc.message)

    user = session.user
    token, jti = create_session_token(user.id, user.email, user.user_metadata)
    log.info("auth.login", user_id=str(user.id), jti=jti)
    return {
        "success": True,
        "message": "Login successful",
        "user": {"id": user.id, "email": user.email, "name": _display_name(user)},
        "token": token,
        "session": session.model_dump(exclude={"user"}),
    }


async def register(req: RegisterRequest, identity: IdentityProvider) -> dict:
    if not req.email or not req.password:
        raise PortalError(400, "Email and password are required")

    metadata = {"full_name": req.full_name} if req.full_name else {}
    try:
        user = await identity.sign_up(req.email, req.password, metadata)
    except IdentityProviderError as exc:
        if exc.status_code >= 500:
            raise
        log.info("auth.register_failure", email=req.email, reason=exc.message)
        raise PortalError(400, "Registration failed", error=exc.message)

    log.info("auth.registered", user_id=str(user.id))
    return {
        "success": True,
        "message": "Registration successful. Please check your email to confirm your account.",
        "user": {"id": user.id, "email": user.email, "name": _display_name(user)},
    }


async def logout(claims: dict, req: LogoutRequest, identity: IdentityProvider) -> dict:
    """Revoke the session token and, when given, the provider session behind it."""
    if req.access_token:
        try:
            await identity.sign_out(req.access_token)
        except IdentityProviderError as exc:
            log.error("auth.logout_failure", user_id=claims["sub"], reason=exc.message)
            raise PortalError(500, "Logout failed")

    revoked = False
    if claims.get("jti"):
        revoked = await revoke_session_token(claims["jti"], remaining_lifetime(claims))
    log.info("auth.logout", user_id=claims["sub"], revoked=revoked)
    return {"success": True, "message": "Logged out successfully"}


async def get_profile(claims: dict, datasource: DataSource, identity: IdentityProvider) -> dict:
    """The caller's profile joined with their organization and provider account details."""
    user_id = uuid.UUID(claims["sub"])
    with downstream("Failed to fetch user profile"):
        profile = await datasource.fetch_one("profiles", {"id": user_id})
        if profile is None:
            raise PortalError(400, "Failed to fetch user profile", error="Profile not found")
        organization = await datasource.fetch_one("organizations", {"id": profile["organization_id"]})

    account = None
    try:
        account = await identity.get_user_by_id(user_id)
    except IdentityProviderError as exc:
        # Provider details are optional here
        log.warning("profile.account_lookup_failed", user_id=str(user_id), reason=exc.message)

    email = (account.email if account else None) or claims.get("email")
    return {
        "success": True,
        "profile": {
            "id": profile["id"],
            "email": email,
            "name": profile.get("display_name") or email,
            "role": profile["role"],
            "organization": (
                {"id": organization["id"], "name": organization["name"]} if organization else None
            ),
            "created_at": profile["created_at"],
            "last_sign_in_at": account.last_sign_in_at if account else None,
        },
    }

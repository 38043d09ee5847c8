"""
Session tokens and request authentication.

- Login exchanges identity provider credentials for a signed session JWT (24h by default)
- Logout puts the token's ``jti`` on a Redis revocation list for its remaining lifetime
- ``get_session_claims`` verifies the bearer token; ``get_caller`` also loads the profile
- ``require_admin`` gates admin-only endpoints
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader

from clinical_portal.core.backends import get_datasource
from clinical_portal.core.config import get_settings
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, ensure_admin
from clinical_portal.core.redis import get_redis

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)

TOKEN_REQUIRED = "Access token required"
TOKEN_INVALID = "Invalid or expired token"

# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_session_token(
    user_id: uuid.UUID,
    email: Optional[str],
    user_metadata: Optional[dict[str, Any]] = None,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session JWT. Returns (token, jti)."""
    settings = get_settings()
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "userId": str(user_id),
        "email": email,
        "user_metadata": user_metadata or {},
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_session_token(token: str) -> dict:
    """Decode and verify a session JWT. Raises jwt.PyJWTError on failure."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp", "iat"]},
    )


# ---------------------------------------------------------------------------
# Revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_session_token(jti: str, ttl_seconds: int) -> bool:
    """Add a token ID to the revocation list. Returns False when Redis is not configured."""
    redis = await get_redis()
    if redis is None:
        return False
    await redis.setex(f"session:revoked:{jti}", max(ttl_seconds, 1), "1")
    return True


async def is_session_token_revoked(jti: str) -> bool:
    redis = await get_redis()
    if redis is None:
        return False
    return await redis.exists(f"session:revoked:{jti}") > 0


def remaining_lifetime(claims: dict) -> int:
    """Seconds until the token in ``claims`` expires."""
    exp = int(claims.get("exp", 0))
    return max(exp - int(datetime.now(timezone.utc).timestamp()), 0)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


async def get_session_claims(
    authorization: Optional[str] = Depends(api_key_header),
) -> dict:
    """Verify the bearer token and return its claims."""
    token = _bearer_token(authorization)
    if not token:
        raise PortalError(401, TOKEN_REQUIRED)
    try:
        claims = decode_session_token(token)
    except jwt.PyJWTError:
        raise PortalError(403, TOKEN_INVALID)

    jti = claims.get("jti")
    if jti and await is_session_token_revoked(jti):
        log.info("auth.revoked_token_used", jti=jti)
        raise PortalError(403, TOKEN_INVALID)

    structlog.contextvars.bind_contextvars(user_id=claims["sub"])
    return claims


async def get_caller(
    claims: dict = Depends(get_session_claims),
    datasource: DataSource = Depends(get_datasource),
) -> Caller:
    """Authenticated caller with organization and role from their profile."""
    try:
        user_id = uuid.UUID(claims["sub"])
    except ValueError:
        raise PortalError(403, TOKEN_INVALID)

    with downstream("Failed to get user profile"):
        profile = await datasource.fetch_one("profiles", {"id": user_id})
    if profile is None:
        raise PortalError(400, "Failed to get user profile")

    await datasource.bind_identity(user_id)
    return Caller(
        user_id=user_id,
        organization_id=profile["organization_id"],
        role=profile["role"],
        email=claims.get("email"),
        display_name=profile.get("display_name"),
        user_metadata=claims.get("user_metadata") or {},
        token_id=claims.get("jti"),
    )


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """Requires the admin role."""
    ensure_admin(caller)
    return caller

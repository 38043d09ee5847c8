"""
Identity provider adapter.

Passwords, provider sessions and account records live in the managed identity
service (Supabase GoTrue). ``SupabaseIdentityProvider`` speaks its REST API
with httpx; ``MockIdentityProvider`` keeps accounts in memory for development
and tests.

GoTrue endpoints used:

POST /auth/v1/token?grant_type=password   sign in
POST /auth/v1/signup                      sign up
POST /auth/v1/logout                      revoke a provider session
GET  /auth/v1/admin/users/{id}            look up an account (service key)
GET  /auth/v1/admin/users                 page through accounts (service key)
"""

from __future__ import annotations

import secrets
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import httpx
import structlog
from httpx import Timeout
from pydantic import BaseModel, Field

from clinical_portal.core.errors import IdentityProviderError
from clinical_portal.models.base import utcnow

log = structlog.get_logger()

ADMIN_PAGE_SIZE = 1000


class IdentityUser(BaseModel):
    """An account as the identity provider reports it."""
    id: uuid.UUID
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class IdentitySession(BaseModel):
    """A provider session returned by a successful password sign-in."""
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    user: IdentityUser


class IdentityProvider(ABC):

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> IdentitySession:
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> IdentityUser:
        ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[IdentityUser]:
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        ...


# ---------------------------------------------------------------------------
# Supabase GoTrue
# ---------------------------------------------------------------------------

def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        if isinstance(body, dict) and body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


def _rejection_status(response: httpx.Response, rejected: int) -> int:
    """Status for a failed call: provider outages are 502, anything else is ``rejected``."""
    return 502 if response.status_code >= 500 else rejected


class SupabaseIdentityProvider(IdentityProvider):
    """GoTrue REST client authenticated with the project's service role key."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.key = key
        self.timeout_s = timeout_s
        self.transport = transport

    def _headers(self, bearer: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {bearer or self.key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        bearer: Optional[str] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        if not self.url or not self.key:
            raise IdentityProviderError("Identity provider is not configured", status_code=503)
        async with httpx.AsyncClient(
            base_url=f"{self.url}/auth/v1",
            timeout=Timeout(self.timeout_s),
            transport=self.transport,
        ) as client:
            try:
                return await client.request(
                    method, path, headers=self._headers(bearer), params=params, json=json
                )
            except httpx.HTTPError as exc:
                log.error("identity.unreachable", path=path, error=str(exc))
                raise IdentityProviderError("Identity provider unavailable", status_code=502) from exc

    async def sign_in_with_password(self, email, password):
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code != 200:
            raise IdentityProviderError(_error_message(response), status_code=_rejection_status(response, 401))
        return IdentitySession.model_validate(response.json())

    async def sign_up(self, email, password, metadata=None):
        response = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        if response.status_code not in (200, 201):
            raise IdentityProviderError(_error_message(response), status_code=_rejection_status(response, 400))
        body = response.json()
        # With email confirmation enabled GoTrue returns the bare user, otherwise a session
        return IdentityUser.model_validate(body.get("user") or body)

    async def sign_out(self, access_token):
        response = await self._request("POST", "/logout", bearer=access_token)
        if response.status_code not in (200, 204):
            raise IdentityProviderError(_error_message(response), status_code=500)

    async def get_user_by_id(self, user_id):
        response = await self._request("GET", f"/admin/users/{user_id}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise IdentityProviderError(_error_message(response), status_code=502)
        return IdentityUser.model_validate(response.json())

    async def find_user_by_email(self, email):
        wanted = email.strip().lower()
        page = 1
        while True:
            response = await self._request(
                "GET", "/admin/users", params={"page": page, "per_page": ADMIN_PAGE_SIZE}
            )
            if response.status_code != 200:
                raise IdentityProviderError(_error_message(response), status_code=502)
            users = response.json().get("users", [])
            for item in users:
                if (item.get("email") or "").lower() == wanted:
                    return IdentityUser.model_validate(item)
            if len(users) < ADMIN_PAGE_SIZE:
                return None
            page += 1


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class MockIdentityProvider(IdentityProvider):
    """Accounts and provider sessions held in process memory."""

    def __init__(self):
        self._users: dict[uuid.UUID, IdentityUser] = {}
        self._passwords: dict[uuid.UUID, str] = {}
        self._sessions: dict[str, uuid.UUID] = {}

    def register(
        self,
        email: str,
        password: str,
        *,
        user_id: Optional[uuid.UUID] = None,
        full_name: Optional[str] = None,
    ) -> IdentityUser:
        """Create an account immediately; used for seeding and tests."""
        if self._by_email(email) is not None:
            raise IdentityProviderError("User already registered", status_code=422)
        user = IdentityUser(
            id=user_id or uuid.uuid4(),
            email=email.lower(),
            user_metadata={"full_name": full_name} if full_name else {},
            created_at=utcnow(),
        )
        self._users[user.id] = user
        self._passwords[user.id] = password
        return user

    def _by_email(self, email: str) -> Optional[IdentityUser]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    def active_sessions(self, user_id: uuid.UUID) -> int:
        return sum(1 for owner in self._sessions.values() if owner == user_id)

    async def sign_in_with_password(self, email, password):
        user = self._by_email(email)
        if user is None or not secrets.compare_digest(self._passwords[user.id].encode(), password.encode()):
            raise IdentityProviderError("Invalid login credentials", status_code=401)
        user.last_sign_in_at = utcnow()
        access_token = secrets.token_urlsafe(32)
        self._sessions[access_token] = user.id
        return IdentitySession(
            access_token=access_token,
            expires_in=3600,
            refresh_token=secrets.token_urlsafe(16),
            user=user.model_copy(),
        )

    async def sign_up(self, email, password, metadata=None):
        return self.register(email, password, full_name=(metadata or {}).get("full_name"))

    async def sign_out(self, access_token):
        self._sessions.pop(access_token, None)

    async def get_user_by_id(self, user_id):
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def find_user_by_email(self, email):
        user = self._by_email(email)
        return user.model_copy() if user else None

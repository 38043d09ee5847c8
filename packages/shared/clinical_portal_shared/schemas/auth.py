"""Authentication and profile schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr

from .common import CamelModel


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LogoutRequest(CamelModel):
    """``access_token`` is the identity provider session to end alongside the portal session."""
    access_token: Optional[str] = None


class SessionUser(BaseModel):
    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None


class ProviderSession(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    user: SessionUser
    token: str
    session: ProviderSession


class ProfileOrganization(BaseModel):
    id: UUID
    name: str


class ProfileDetail(BaseModel):
    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    organization: Optional[ProfileOrganization] = None
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None


class ProfileResponse(BaseModel):
    success: bool = True
    profile: ProfileDetail


class VerifyResponse(BaseModel):
    success: bool = True
    user: dict[str, Any]

"""User (profile) management schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import EmailStr, Field

from .common import CamelModel, Envelope, Record


# Roles stay plain strings so an unknown role gets the portal's own message.

class UserCreateRequest(CamelModel):
    """Attach an existing identity provider account to the admin's organization."""
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    display_name: Optional[str] = Field(default=None, max_length=200)
    clinical_trial_id: Optional[UUID] = None


class UserUpdateRequest(CamelModel):
    display_name: Optional[str] = Field(default=None, max_length=200)
    role: Optional[str] = None


class UserRecord(Record):
    role: str
    display_name: Optional[str] = None
    organization_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    organizations: Optional[dict[str, Any]] = None


class UserListResponse(Envelope):
    users: list[UserRecord]


class UserResponse(Envelope):
    user: UserRecord


class UserSavedResponse(UserResponse):
    message: str

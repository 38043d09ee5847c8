"""
User Management API endpoints.

GET    /api/users          List profiles (admin: organization, others: self)
POST   /api/users          Attach a registered account to the organization (admin)
GET    /api/users/{userId} Get a profile
PUT    /api/users/{userId} Update display name (self or admin) or role (admin)
DELETE /api/users/{userId} Remove a profile (admin, never self)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource, get_identity_provider
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.identity import IdentityProvider
from clinical_portal.core.policy import Caller
from clinical_portal.services import users as user_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.users import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserSavedResponse,
    UserUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "users": await user_service.list_users(datasource, caller)}


@router.post("", response_model=UserSavedResponse, status_code=201)
async def create_user(
    body: UserCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Create a profile for an existing account, optionally assigning it to a trial."""
    user = await user_service.create_user(datasource, identity, caller, body)
    return {"success": True, "message": "User created successfully", "user": user}


@router.get("/{userId}", response_model=UserResponse)
async def get_user(
    userId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "user": await user_service.get_user(datasource, caller, userId)}


@router.put("/{userId}", response_model=UserSavedResponse)
async def update_user(
    userId: uuid.UUID,
    body: UserUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    user = await user_service.update_user(datasource, caller, userId, body)
    return {"success": True, "message": "User updated successfully", "user": user}


@router.delete("/{userId}", response_model=MessageResponse)
async def delete_user(
    userId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await user_service.delete_user(datasource, caller, userId)
    return {"success": True, "message": "User deleted successfully"}

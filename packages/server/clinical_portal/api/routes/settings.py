"""
Application settings API endpoints.

GET /api/settings       All settings as {key: {value, type, description}}
PUT /api/settings/{key} Change one value (admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import settings as settings_service
from clinical_portal_shared.schemas.resources import (
    SettingSavedResponse,
    SettingsResponse,
    SettingUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=SettingsResponse)
async def get_settings(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "settings": await settings_service.get_settings_map(datasource)}


@router.put("/{key}", response_model=SettingSavedResponse)
async def update_setting(
    key: str,
    body: SettingUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    setting = await settings_service.update_setting(datasource, caller, key, body.value)
    return {"success": True, "message": "Setting updated successfully", "setting": setting}

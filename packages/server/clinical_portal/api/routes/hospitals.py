"""
Hospital leaderboard API endpoints.

GET    /api/hospitals              Ranked hospitals plus totals
POST   /api/hospitals              Add a hospital (admin)
GET    /api/hospitals/{hospitalId} Get a hospital
PUT    /api/hospitals/{hospitalId} Update a hospital (admin)
DELETE /api/hospitals/{hospitalId} Delete a hospital (admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import hospitals as hospital_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.resources import (
    HospitalCreateRequest,
    HospitalListResponse,
    HospitalResponse,
    HospitalSavedResponse,
    HospitalUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=HospitalListResponse)
async def list_hospitals(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    hospitals, summary = await hospital_service.list_hospitals(datasource)
    return {"success": True, "hospitals": hospitals, "summary": summary}


@router.post("", response_model=HospitalSavedResponse, status_code=201)
async def create_hospital(
    body: HospitalCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    hospital = await hospital_service.create_hospital(datasource, caller, body)
    return {"success": True, "message": "Hospital created successfully", "hospital": hospital}


@router.get("/{hospitalId}", response_model=HospitalResponse)
async def get_hospital(
    hospitalId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "hospital": await hospital_service.get_hospital(datasource, hospitalId)}


@router.put("/{hospitalId}", response_model=HospitalSavedResponse)
async def update_hospital(
    hospitalId: uuid.UUID,
    body: HospitalUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    hospital = await hospital_service.update_hospital(datasource, caller, hospitalId, body)
    return {"success": True, "message": "Hospital updated successfully", "hospital": hospital}


@router.delete("/{hospitalId}", response_model=MessageResponse)
async def delete_hospital(
    hospitalId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await hospital_service.delete_hospital(datasource, caller, hospitalId)
    return {"success": True, "message": "Hospital deleted successfully"}

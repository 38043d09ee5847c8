"""
Enrollment API endpoints.

GET    /api/enrollments                List enrollments for accessible trials (optionally one trial)
POST   /api/enrollments                Add to an accessible trial
GET    /api/enrollments/{itemId}       Get one
PUT    /api/enrollments/{itemId}       Update
DELETE /api/enrollments/{itemId}       Delete
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import content as content_service
from clinical_portal.services.content import ENROLLMENTS
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.content import (
    EnrollmentCreateRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollmentSavedResponse,
    EnrollmentUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=EnrollmentListResponse)
async def list_enrollments(
    clinicalTrialId: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    rows = await content_service.list_content(datasource, caller, ENROLLMENTS, clinicalTrialId)
    return {"success": True, "enrollments": rows}


@router.post("", response_model=EnrollmentSavedResponse, status_code=201)
async def create_enrollment(
    body: EnrollmentCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.create_content(datasource, caller, ENROLLMENTS, body)
    return {"success": True, "message": "Enrollment created successfully", "enrollment": row}


@router.get("/{itemId}", response_model=EnrollmentResponse)
async def get_enrollment(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.get_content(datasource, caller, ENROLLMENTS, itemId)
    return {"success": True, "enrollment": row}


@router.put("/{itemId}", response_model=EnrollmentSavedResponse)
async def update_enrollment(
    itemId: uuid.UUID,
    body: EnrollmentUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.update_content(datasource, caller, ENROLLMENTS, itemId, body)
    return {"success": True, "message": "Enrollment updated successfully", "enrollment": row}


@router.delete("/{itemId}", response_model=MessageResponse)
async def delete_enrollment(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await content_service.delete_content(datasource, caller, ENROLLMENTS, itemId)
    return {"success": True, "message": "Enrollment deleted successfully"}

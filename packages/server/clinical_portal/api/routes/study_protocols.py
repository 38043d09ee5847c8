"""
Study protocol API endpoints.

GET    /api/study-protocols                List study protocols for accessible trials (optionally one trial)
POST   /api/study-protocols                Add to an accessible trial
GET    /api/study-protocols/{itemId}       Get one
PUT    /api/study-protocols/{itemId}       Update
DELETE /api/study-protocols/{itemId}       Delete
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
from clinical_portal.services.content import STUDY_PROTOCOLS
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.content import (
    StudyProtocolCreateRequest,
    StudyProtocolListResponse,
    StudyProtocolResponse,
    StudyProtocolSavedResponse,
    StudyProtocolUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=StudyProtocolListResponse)
async def list_study_protocols(
    clinicalTrialId: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    rows = await content_service.list_content(datasource, caller, STUDY_PROTOCOLS, clinicalTrialId)
    return {"success": True, "studyProtocols": rows}


@router.post("", response_model=StudyProtocolSavedResponse, status_code=201)
async def create_study_protocol(
    body: StudyProtocolCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.create_content(datasource, caller, STUDY_PROTOCOLS, body)
    return {"success": True, "message": "Study protocol created successfully", "studyProtocol": row}


@router.get("/{itemId}", response_model=StudyProtocolResponse)
async def get_study_protocol(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.get_content(datasource, caller, STUDY_PROTOCOLS, itemId)
    return {"success": True, "studyProtocol": row}


@router.put("/{itemId}", response_model=StudyProtocolSavedResponse)
async def update_study_protocol(
    itemId: uuid.UUID,
    body: StudyProtocolUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.update_content(datasource, caller, STUDY_PROTOCOLS, itemId, body)
    return {"success": True, "message": "Study protocol updated successfully", "studyProtocol": row}


@router.delete("/{itemId}", response_model=MessageResponse)
async def delete_study_protocol(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await content_service.delete_content(datasource, caller, STUDY_PROTOCOLS, itemId)
    return {"success": True, "message": "Study protocol deleted successfully"}

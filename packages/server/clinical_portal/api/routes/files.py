"""
File index API endpoints.

GET    /api/files          Files of the organization visible to the caller
POST   /api/files          Record an uploaded object
DELETE /api/files/{fileId} Remove the record (uploader or admin)
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import files as file_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.content import (
    FileCreateRequest,
    FileListResponse,
    FileSavedResponse,
)

router = APIRouter()


@router.get("", response_model=FileListResponse)
async def list_files(
    clinicalTrialId: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "files": await file_service.list_files(datasource, caller, clinicalTrialId)}


@router.post("", response_model=FileSavedResponse, status_code=201)
async def register_file(
    body: FileCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await file_service.register_file(datasource, caller, body)
    return {"success": True, "message": "File registered successfully", "file": row}


@router.delete("/{fileId}", response_model=MessageResponse)
async def delete_file(
    fileId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await file_service.delete_file(datasource, caller, fileId)
    return {"success": True, "message": "File deleted successfully"}

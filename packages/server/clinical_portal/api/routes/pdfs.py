"""
PDF document API endpoints.

GET    /api/pdfs         Active documents, newest upload first
POST   /api/pdfs         Register a document
DELETE /api/pdfs/{pdfId} Delete (uploader or admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import pdfs as pdf_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.resources import (
    PdfCreateRequest,
    PdfListResponse,
    PdfSavedResponse,
)

router = APIRouter()


@router.get("", response_model=PdfListResponse)
async def list_pdfs(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "pdfDocuments": await pdf_service.list_pdfs(datasource)}


@router.post("", response_model=PdfSavedResponse, status_code=201)
async def create_pdf(
    body: PdfCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    document = await pdf_service.create_pdf(datasource, caller, body)
    return {"success": True, "message": "PDF document created successfully", "pdfDocument": document}


@router.delete("/{pdfId}", response_model=MessageResponse)
async def delete_pdf(
    pdfId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await pdf_service.delete_pdf(datasource, caller, pdfId)
    return {"success": True, "message": "PDF document deleted successfully"}

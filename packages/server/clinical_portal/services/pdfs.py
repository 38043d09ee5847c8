"""PDF document library service."""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.datasource import DataSource
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, ensure_owner_or_admin
from clinical_portal_shared.schemas.resources import PdfCreateRequest

log = structlog.get_logger()


async def list_pdfs(datasource: DataSource) -> list[dict]:
    with downstream("Failed to fetch PDF documents"):
        return await datasource.select("pdf_documents", filters={"is_active": True}, order_by=("-upload_date",))


async def create_pdf(datasource: DataSource, caller: Caller, req: PdfCreateRequest) -> dict:
    if not req.title:
        raise PortalError(400, "Title is required")
    with downstream("Failed to create PDF document"):
        row = await datasource.insert(
            "pdf_documents",
            {
                "title": req.title,
                "description": req.description,
                "category": req.category,
                "file_url": req.file_url,
                "file_name": req.file_name,
                "file_size": req.file_size,
                "uploaded_by": caller.user_id,
                "uploaded_by_name": caller.name,
            },
        )
    log.info("pdf.created", pdf_id=str(row["id"]), user_id=str(caller.user_id))
    return row


async def delete_pdf(datasource: DataSource, caller: Caller, pdf_id: uuid.UUID) -> None:
    row = await datasource.fetch_one("pdf_documents", {"id": pdf_id})
    if row is None:
        raise PortalError(404, "PDF document not found")
    ensure_owner_or_admin(caller, row.get("uploaded_by"), "Only the uploader or an admin can delete this document")
    with downstream("Failed to delete PDF document"):
        await datasource.delete("pdf_documents", {"id": pdf_id})
    log.info("pdf.deleted", pdf_id=str(pdf_id), user_id=str(caller.user_id))

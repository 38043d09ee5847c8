"""
File index service.

Objects live in external storage; this service only records where they are.
A file may hang off a clinical trial, in which case trial access rules apply,
or off the organization alone.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import (
    Caller,
    accessible_trial_ids,
    ensure_owner_or_admin,
    ensure_same_organization,
    ensure_trial_access,
)
from clinical_portal_shared.schemas.content import FileCreateRequest

log = structlog.get_logger()


async def list_files(
    datasource: DataSource, caller: Caller, clinical_trial_id: Optional[uuid.UUID] = None
) -> list[Row]:
    with downstream("Failed to fetch files"):
        trial_ids = await accessible_trial_ids(datasource, caller)
        if clinical_trial_id is not None:
            ensure_trial_access(clinical_trial_id, trial_ids)
            return await datasource.select(
                "files",
                filters={"organization_id": caller.organization_id, "clinical_trial_id": clinical_trial_id},
                order_by=("-uploaded_at",),
            )
        rows = await datasource.select(
            "files", filters={"organization_id": caller.organization_id}, order_by=("-uploaded_at",)
        )
    return [row for row in rows if row["clinical_trial_id"] is None or row["clinical_trial_id"] in trial_ids]


async def register_file(datasource: DataSource, caller: Caller, req: FileCreateRequest) -> Row:
    if req.clinical_trial_id is not None:
        ensure_trial_access(req.clinical_trial_id, await accessible_trial_ids(datasource, caller))
    with downstream("Failed to register file"):
        row = await datasource.insert(
            "files",
            {
                "organization_id": caller.organization_id,
                "clinical_trial_id": req.clinical_trial_id,
                "bucket": req.bucket,
                "path": req.path,
                "file_name": req.file_name,
                "file_size": req.file_size,
                "mime_type": req.mime_type,
                "uploaded_by": caller.user_id,
            },
        )
    log.info("file.registered", file_id=str(row["id"]), bucket=req.bucket, user_id=str(caller.user_id))
    return row


async def delete_file(datasource: DataSource, caller: Caller, file_id: uuid.UUID) -> None:
    row = await datasource.fetch_one("files", {"id": file_id})
    if row is None:
        raise PortalError(404, "File not found")
    ensure_same_organization(caller, row["organization_id"], "Cannot delete files from different organizations")
    ensure_owner_or_admin(caller, row.get("uploaded_by"), "Only the uploader or an admin can delete this file")
    with downstream("Failed to delete file"):
        await datasource.delete("files", {"id": file_id})
    log.info("file.deleted", file_id=str(file_id), user_id=str(caller.user_id))

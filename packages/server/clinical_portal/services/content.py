"""
Trial-scoped content service.

Enrollments, news updates, training materials and study protocols share one
shape: each row belongs to a clinical trial (and that trial's organization)
and is visible to whoever can access the trial. ``ContentKind`` describes the
per-table differences.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row, attach
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, accessible_trial_ids, ensure_trial_access
from clinical_portal_shared.schemas.common import CamelModel

log = structlog.get_logger()


@dataclass(frozen=True)
class ContentKind:
    table: str
    label: str
    plural: str
    columns: tuple[str, ...]
    required: tuple[str, ...]
    required_message: str
    order_by: tuple[str, ...] = ("-created_at",)

    @property
    def event(self) -> str:
        return self.table.rstrip("s")


ENROLLMENTS = ContentKind(
    table="enrollments",
    label="Enrollment",
    plural="enrollments",
    columns=("participant_name", "enrollment_date", "notes", "storage_path"),
    required=("participant_name", "enrollment_date"),
    required_message="Clinical trial ID, participant name, and enrollment date are required",
)

NEWS_UPDATES = ContentKind(
    table="news_updates",
    label="News update",
    plural="news updates",
    columns=("title", "body", "storage_path"),
    required=("title", "body"),
    required_message="Clinical trial ID, title, and body are required",
    order_by=("-published_at",),
)

TRAINING_MATERIALS = ContentKind(
    table="training_materials",
    label="Training material",
    plural="training materials",
    columns=("title", "description", "storage_path"),
    required=("title",),
    required_message="Clinical trial ID and title are required",
)

STUDY_PROTOCOLS = ContentKind(
    table="study_protocols",
    label="Study protocol",
    plural="study protocols",
    columns=("title", "version", "storage_path"),
    required=("title",),
    required_message="Clinical trial ID and title are required",
)


async def _embed(datasource: DataSource, rows: list[Row]) -> list[Row]:
    rows = await attach(
        datasource, rows, table="clinical_trials", key="clinical_trial_id", name="clinical_trials", columns=("id", "name")
    )
    return await attach(
        datasource, rows, table="profiles", key="created_by", name="profiles", columns=("id", "display_name")
    )


async def _load(datasource: DataSource, caller: Caller, kind: ContentKind, item_id: uuid.UUID) -> Row:
    row = await datasource.fetch_one(kind.table, {"id": item_id})
    if row is None:
        raise PortalError(404, f"{kind.label} not found")
    ensure_trial_access(row["clinical_trial_id"], await accessible_trial_ids(datasource, caller))
    return row


async def list_content(
    datasource: DataSource,
    caller: Caller,
    kind: ContentKind,
    clinical_trial_id: Optional[uuid.UUID] = None,
) -> list[Row]:
    """Rows from every accessible trial, or from one trial when ``clinical_trial_id`` is given."""
    with downstream(f"Failed to fetch {kind.plural}"):
        trial_ids = await accessible_trial_ids(datasource, caller)
        if clinical_trial_id is not None:
            ensure_trial_access(clinical_trial_id, trial_ids)
            trial_ids = {clinical_trial_id}
        if not trial_ids:
            return []
        rows = await datasource.select(
            kind.table,
            filters={"organization_id": caller.organization_id},
            within={"clinical_trial_id": trial_ids},
            order_by=kind.order_by,
        )
        return await _embed(datasource, rows)


async def get_content(datasource: DataSource, caller: Caller, kind: ContentKind, item_id: uuid.UUID) -> Row:
    row = await _load(datasource, caller, kind, item_id)
    [row] = await _embed(datasource, [row])
    return row


async def create_content(datasource: DataSource, caller: Caller, kind: ContentKind, req: CamelModel) -> Row:
    fields = req.provided()
    trial_id = fields.get("clinical_trial_id")
    if trial_id is None or any(fields.get(column) in (None, "") for column in kind.required):
        raise PortalError(400, kind.required_message)
    ensure_trial_access(trial_id, await accessible_trial_ids(datasource, caller))

    values = {column: fields[column] for column in kind.columns if fields.get(column) is not None}
    with downstream(f"Failed to create {kind.label.lower()}"):
        row = await datasource.insert(
            kind.table,
            {
                **values,
                "organization_id": caller.organization_id,
                "clinical_trial_id": trial_id,
                "created_by": caller.user_id,
            },
        )
    log.info(f"{kind.event}.created", item_id=str(row["id"]), trial_id=str(trial_id), user_id=str(caller.user_id))
    [row] = await _embed(datasource, [row])
    return row


async def update_content(
    datasource: DataSource, caller: Caller, kind: ContentKind, item_id: uuid.UUID, req: CamelModel
) -> Row:
    row = await _load(datasource, caller, kind, item_id)
    fields = req.provided()
    values = {column: fields[column] for column in kind.columns if column in fields}
    for column in kind.required:
        if column in values and values[column] in (None, ""):
            raise PortalError(400, f"{column.replace('_', ' ').capitalize()} cannot be empty")
    if values:
        with downstream(f"Failed to update {kind.label.lower()}"):
            [row] = await datasource.update(kind.table, {"id": item_id}, values)
        log.info(f"{kind.event}.updated", item_id=str(item_id), fields=sorted(values))
    [row] = await _embed(datasource, [row])
    return row


async def delete_content(datasource: DataSource, caller: Caller, kind: ContentKind, item_id: uuid.UUID) -> None:
    await _load(datasource, caller, kind, item_id)
    with downstream(f"Failed to delete {kind.label.lower()}"):
        await datasource.delete(kind.table, {"id": item_id})
    log.info(f"{kind.event}.deleted", item_id=str(item_id), user_id=str(caller.user_id))

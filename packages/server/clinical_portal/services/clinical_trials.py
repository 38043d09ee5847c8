"""
Clinical trial service: trials and the user assignments that grant access to them.
"""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.datasource import DataSource, Row, attach
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import (
    Caller,
    accessible_trial_ids,
    ensure_admin,
    ensure_same_organization,
    ensure_trial_access,
)
from clinical_portal_shared.schemas.clinical_trials import (
    AssignmentCreateRequest,
    ClinicalTrialCreateRequest,
    ClinicalTrialUpdateRequest,
)

log = structlog.get_logger()

TRIAL_ORDER = ("-is_active", "-created_at")


def _present(row: Row) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "description": row.get("description"),
        "is_active": row["is_active"],
        "organization_id": row["organization_id"],
        "created_by": row.get("created_by"),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
        "organizations": row.get("organizations"),
    }


async def _with_organizations(datasource: DataSource, rows: list[Row]) -> list[Row]:
    return await attach(
        datasource, rows, table="organizations", key="organization_id", name="organizations", columns=("id", "name")
    )


async def _load(datasource: DataSource, trial_id: uuid.UUID) -> Row:
    trial = await datasource.fetch_one("clinical_trials", {"id": trial_id})
    if trial is None:
        raise PortalError(404, "Clinical trial not found")
    return trial


async def load_owned_trial(datasource: DataSource, caller: Caller, trial_id: uuid.UUID, action: str) -> Row:
    """A trial the caller administers: admin role and same organization."""
    ensure_admin(caller, f"Only admins can {action} clinical trials")
    trial = await _load(datasource, trial_id)
    ensure_same_organization(
        caller, trial["organization_id"], f"Cannot {action} clinical trials from different organizations"
    )
    return trial


async def list_trials(datasource: DataSource, caller: Caller) -> list[dict]:
    """Admins get every trial of their organization, others only the trials assigned to them."""
    with downstream("Failed to fetch clinical trials"):
        if caller.is_admin:
            rows = await datasource.select(
                "clinical_trials", filters={"organization_id": caller.organization_id}, order_by=TRIAL_ORDER
            )
        else:
            ids = await accessible_trial_ids(datasource, caller)
            if not ids:
                return []
            rows = await datasource.select("clinical_trials", within={"id": ids}, order_by=TRIAL_ORDER)
        rows = await _with_organizations(datasource, rows)
    return [_present(row) for row in rows]


async def get_trial(datasource: DataSource, caller: Caller, trial_id: uuid.UUID) -> dict:
    trial = await _load(datasource, trial_id)
    ensure_trial_access(trial_id, await accessible_trial_ids(datasource, caller))
    [trial] = await _with_organizations(datasource, [trial])
    return _present(trial)


async def create_trial(datasource: DataSource, caller: Caller, req: ClinicalTrialCreateRequest) -> dict:
    if not req.name or not req.name.strip():
        raise PortalError(400, "Trial name is required")
    ensure_admin(caller, "Only admins can create clinical trials")

    with downstream("Failed to create clinical trial"):
        trial = await datasource.insert(
            "clinical_trials",
            {
                "organization_id": caller.organization_id,
                "name": req.name.strip(),
                "description": req.description,
                "is_active": req.is_active,
                "created_by": caller.user_id,
            },
        )
    log.info("trial.created", trial_id=str(trial["id"]), org_id=str(caller.organization_id))
    [trial] = await _with_organizations(datasource, [trial])
    return _present(trial)


async def update_trial(
    datasource: DataSource, caller: Caller, trial_id: uuid.UUID, req: ClinicalTrialUpdateRequest
) -> dict:
    trial = await load_owned_trial(datasource, caller, trial_id, "update")
    values = {key: value for key, value in req.provided().items() if value is not None}
    if values:
        with downstream("Failed to update clinical trial"):
            [trial] = await datasource.update("clinical_trials", {"id": trial_id}, values)
        log.info("trial.updated", trial_id=str(trial_id), fields=sorted(values))
    [trial] = await _with_organizations(datasource, [trial])
    return _present(trial)


async def delete_trial(datasource: DataSource, caller: Caller, trial_id: uuid.UUID) -> None:
    """Hard delete; assignments and trial content go with it."""
    await load_owned_trial(datasource, caller, trial_id, "delete")
    with downstream("Failed to delete clinical trial"):
        await datasource.delete("clinical_trials", {"id": trial_id})
    log.info("trial.deleted", trial_id=str(trial_id), org_id=str(caller.organization_id))


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------

async def list_assignments(datasource: DataSource, caller: Caller, trial_id: uuid.UUID) -> list[dict]:
    await load_owned_trial(datasource, caller, trial_id, "manage")
    rows = await datasource.select(
        "user_clinical_assignments", filters={"clinical_trial_id": trial_id}, order_by=("created_at",)
    )
    rows = await attach(
        datasource, rows, table="profiles", key="user_id", name="profiles", columns=("id", "display_name", "role")
    )
    return rows


async def assign_user(
    datasource: DataSource, caller: Caller, trial_id: uuid.UUID, req: AssignmentCreateRequest
) -> dict:
    await load_owned_trial(datasource, caller, trial_id, "manage")
    profile = await datasource.fetch_one("profiles", {"id": req.user_id})
    if profile is None:
        raise PortalError(404, "User not found")
    ensure_same_organization(caller, profile["organization_id"], "Cannot assign users from different organizations")

    existing = await datasource.fetch_one(
        "user_clinical_assignments", {"user_id": req.user_id, "clinical_trial_id": trial_id}
    )
    if existing is not None:
        raise PortalError(409, "User is already assigned to this clinical trial")

    assignment = await datasource.insert(
        "user_clinical_assignments",
        {"user_id": req.user_id, "clinical_trial_id": trial_id, "organization_id": caller.organization_id},
    )
    log.info("trial.user_assigned", trial_id=str(trial_id), user_id=str(req.user_id))
    return assignment


async def unassign_user(datasource: DataSource, caller: Caller, trial_id: uuid.UUID, user_id: uuid.UUID) -> None:
    await load_owned_trial(datasource, caller, trial_id, "manage")
    removed = await datasource.delete(
        "user_clinical_assignments", {"user_id": user_id, "clinical_trial_id": trial_id}
    )
    if not removed:
        raise PortalError(404, "Assignment not found")
    log.info("trial.user_unassigned", trial_id=str(trial_id), user_id=str(user_id))

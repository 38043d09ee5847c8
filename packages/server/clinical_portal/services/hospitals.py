"""
Hospital leaderboard service.

Rows are shared by every tenant. Reads tolerate the legacy column spellings
that older imports of the table used.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, ensure_admin
from clinical_portal_shared.schemas.resources import HospitalCreateRequest, HospitalUpdateRequest

log = structlog.get_logger()

# request field -> column
COLUMNS = {
    "name": "hospital_name",
    "location": "location",
    "principal_investigator": "principal_investigator",
    "consented_patients": "consented_patients",
    "randomized_patients": "randomized_patients",
    "consent_rate": "consented_rate",
}


def _first(row: Row, *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def reshape(row: Row) -> dict:
    return {
        "id": row["id"],
        "name": _first(row, "hospital_name", "name", "hospitalName"),
        "location": row.get("location"),
        "principal_investigator": _first(row, "principal_investigator", "principalInvestigator"),
        "consented_patients": _first(row, "consented_patients", "consentedPatients"),
        "randomized_patients": _first(row, "randomized_patients", "randomizedPatients"),
        "consent_rate": _first(row, "consented_rate", "consentRate"),
        "created_at": row.get("created_at"),
    }


def summarize(hospitals: list[dict]) -> dict:
    return {
        "totalConsented": sum(h["consented_patients"] or 0 for h in hospitals),
        "totalRandomized": sum(h["randomized_patients"] or 0 for h in hospitals),
        "totalHospitals": len(hospitals),
    }


def consent_rate(consented: int, randomized: int) -> Optional[float]:
    """Randomized patients as a percentage of consented ones."""
    if not consented:
        return None
    return round(randomized / consented * 100, 2)


def _check_counts(consented: int, randomized: int) -> None:
    # randomized <= consented keeps the derived rate within 0..100
    if randomized > consented:
        raise PortalError(400, "Randomized patients cannot exceed consented patients")


async def _load(datasource: DataSource, hospital_id: uuid.UUID) -> Row:
    row = await datasource.fetch_one("hospitals", {"id": hospital_id})
    if row is None:
        raise PortalError(404, "Hospital not found")
    return row


async def list_hospitals(datasource: DataSource) -> tuple[list[dict], dict]:
    """Hospitals ranked by randomized patients, with leaderboard totals."""
    with downstream("Failed to fetch hospitals", status_code=500):
        rows = await datasource.select("hospitals", order_by=("-randomized_patients",))
    hospitals = [reshape(row) for row in rows]
    return hospitals, summarize(hospitals)


async def get_hospital(datasource: DataSource, hospital_id: uuid.UUID) -> dict:
    return reshape(await _load(datasource, hospital_id))


async def create_hospital(datasource: DataSource, caller: Caller, req: HospitalCreateRequest) -> dict:
    if not req.name or not req.location or not req.principal_investigator:
        raise PortalError(400, "Name, location, and principal investigator are required")
    ensure_admin(caller, "Only admins can manage hospitals")
    _check_counts(req.consented_patients, req.randomized_patients)

    rate = req.consent_rate
    if rate is None:
        rate = consent_rate(req.consented_patients, req.randomized_patients)
    with downstream("Failed to create hospital"):
        row = await datasource.insert(
            "hospitals",
            {
                "hospital_name": req.name,
                "location": req.location,
                "principal_investigator": req.principal_investigator,
                "consented_patients": req.consented_patients,
                "randomized_patients": req.randomized_patients,
                "consented_rate": rate,
            },
        )
    log.info("hospital.created", hospital_id=str(row["id"]), user_id=str(caller.user_id))
    return reshape(row)


async def update_hospital(
    datasource: DataSource, caller: Caller, hospital_id: uuid.UUID, req: HospitalUpdateRequest
) -> dict:
    ensure_admin(caller, "Only admins can manage hospitals")
    row = await _load(datasource, hospital_id)
    values = {COLUMNS[field]: value for field, value in req.provided().items() if value is not None}
    if "consented_patients" in values or "randomized_patients" in values:
        consented = values.get("consented_patients", row["consented_patients"] or 0)
        randomized = values.get("randomized_patients", row["randomized_patients"] or 0)
        _check_counts(consented, randomized)
        values.setdefault("consented_rate", consent_rate(consented, randomized))
    if values:
        with downstream("Failed to update hospital"):
            [row] = await datasource.update("hospitals", {"id": hospital_id}, values)
        log.info("hospital.updated", hospital_id=str(hospital_id), fields=sorted(values))
    return reshape(row)


async def delete_hospital(datasource: DataSource, caller: Caller, hospital_id: uuid.UUID) -> None:
    ensure_admin(caller, "Only admins can manage hospitals")
    await _load(datasource, hospital_id)
    with downstream("Failed to delete hospital"):
        await datasource.delete("hospitals", {"id": hospital_id})
    log.info("hospital.deleted", hospital_id=str(hospital_id), user_id=str(caller.user_id))

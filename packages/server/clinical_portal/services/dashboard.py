"""Dashboard statistics for the caller's organization."""

from __future__ import annotations

from clinical_portal.core.datasource import DataSource
from clinical_portal.core.errors import downstream
from clinical_portal.core.policy import Caller, accessible_trial_ids


async def get_stats(datasource: DataSource, caller: Caller) -> dict:
    with downstream("Failed to get dashboard statistics", status_code=500):
        stats = await datasource.rpc("get_organization_stats", {"org_id": caller.organization_id})
    with downstream("Failed to get accessible trials", status_code=500):
        trials = await accessible_trial_ids(datasource, caller)
    return {
        **(stats or {}),
        "accessibleTrials": len(trials),
        "userRole": caller.role,
    }

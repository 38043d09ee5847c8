"""
Dashboard API endpoint.

GET /api/dashboard  Organization statistics, accessible trial count and caller role
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import dashboard as dashboard_service
from clinical_portal_shared.schemas.resources import DashboardResponse

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "stats": await dashboard_service.get_stats(datasource, caller)}

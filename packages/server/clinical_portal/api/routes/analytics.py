"""
Usage analytics API endpoints.

GET  /api/analytics       Per-user usage (admin: everyone, others: self)
POST /api/analytics/track Record an app open and optional tab view
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import analytics as analytics_service
from clinical_portal_shared.schemas.resources import (
    AnalyticsListResponse,
    AnalyticsSavedResponse,
    AnalyticsTrackRequest,
)

router = APIRouter()


@router.get("", response_model=AnalyticsListResponse)
async def list_analytics(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "analytics": await analytics_service.list_analytics(datasource, caller)}


@router.post("/track", response_model=AnalyticsSavedResponse)
async def track(
    body: AnalyticsTrackRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await analytics_service.track(datasource, caller, body.tab_viewed)
    return {"success": True, "message": "Analytics updated successfully", "analytics": row}

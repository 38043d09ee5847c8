"""
Trial news update API endpoints (news scoped to one clinical trial).

GET    /api/news-updates                List news updates for accessible trials (optionally one trial)
POST   /api/news-updates                Add to an accessible trial
GET    /api/news-updates/{itemId}       Get one
PUT    /api/news-updates/{itemId}       Update
DELETE /api/news-updates/{itemId}       Delete
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import content as content_service
from clinical_portal.services.content import NEWS_UPDATES
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.content import (
    NewsUpdateCreateRequest,
    NewsUpdateListResponse,
    NewsUpdateResponse,
    NewsUpdateSavedResponse,
    NewsUpdateUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=NewsUpdateListResponse)
async def list_news_updates(
    clinicalTrialId: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    rows = await content_service.list_content(datasource, caller, NEWS_UPDATES, clinicalTrialId)
    return {"success": True, "newsUpdates": rows}


@router.post("", response_model=NewsUpdateSavedResponse, status_code=201)
async def create_news_update(
    body: NewsUpdateCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.create_content(datasource, caller, NEWS_UPDATES, body)
    return {"success": True, "message": "News update created successfully", "newsUpdate": row}


@router.get("/{itemId}", response_model=NewsUpdateResponse)
async def get_news_update(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.get_content(datasource, caller, NEWS_UPDATES, itemId)
    return {"success": True, "newsUpdate": row}


@router.put("/{itemId}", response_model=NewsUpdateSavedResponse)
async def update_news_update(
    itemId: uuid.UUID,
    body: NewsUpdateUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.update_content(datasource, caller, NEWS_UPDATES, itemId, body)
    return {"success": True, "message": "News update updated successfully", "newsUpdate": row}


@router.delete("/{itemId}", response_model=MessageResponse)
async def delete_news_update(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await content_service.delete_content(datasource, caller, NEWS_UPDATES, itemId)
    return {"success": True, "message": "News update deleted successfully"}

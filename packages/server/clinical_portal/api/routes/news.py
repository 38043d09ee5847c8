"""
Portal news API endpoints.

GET    /api/news          Active news items, newest first
POST   /api/news          Publish (admin)
PUT    /api/news/{newsId} Edit or deactivate (admin)
DELETE /api/news/{newsId} Delete (admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import news as news_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.resources import (
    NewsCreateRequest,
    NewsListResponse,
    NewsSavedResponse,
    NewsUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=NewsListResponse)
async def list_news(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "newsItems": await news_service.list_news(datasource)}


@router.post("", response_model=NewsSavedResponse, status_code=201)
async def create_news(
    body: NewsCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    item = await news_service.create_news(datasource, caller, body)
    return {"success": True, "message": "News item created successfully", "newsItem": item}


@router.put("/{newsId}", response_model=NewsSavedResponse)
async def update_news(
    newsId: uuid.UUID,
    body: NewsUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    item = await news_service.update_news(datasource, caller, newsId, body)
    return {"success": True, "message": "News item updated successfully", "newsItem": item}


@router.delete("/{newsId}", response_model=MessageResponse)
async def delete_news(
    newsId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await news_service.delete_news(datasource, caller, newsId)
    return {"success": True, "message": "News item deleted successfully"}

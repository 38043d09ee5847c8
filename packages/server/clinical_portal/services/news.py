"""
Global news service (the portal-wide ``news`` table, not trial news updates).
"""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, ensure_admin
from clinical_portal_shared.schemas.resources import NewsCreateRequest, NewsUpdateRequest

log = structlog.get_logger()

COLUMNS = {"title": "news_title", "content": "news_content", "is_active": "is_active"}


def reshape(row: Row) -> dict:
    return {
        "id": row["id"],
        "title": row["news_title"],
        "content": row["news_content"],
        "created_by": row.get("created_by"),
        "created_by_name": row.get("created_by_name"),
        "date": row.get("created_date"),
        "is_active": row["is_active"],
        "created_at": row.get("created_at"),
    }


async def _load(datasource: DataSource, item_id: uuid.UUID) -> Row:
    row = await datasource.fetch_one("news", {"id": item_id})
    if row is None:
        raise PortalError(404, "News item not found")
    return row


async def list_news(datasource: DataSource) -> list[dict]:
    with downstream("Failed to fetch news", status_code=500):
        rows = await datasource.select("news", filters={"is_active": True}, order_by=("-created_date",))
    return [reshape(row) for row in rows]


async def create_news(datasource: DataSource, caller: Caller, req: NewsCreateRequest) -> dict:
    if not req.title or not req.content:
        raise PortalError(400, "Title and content are required")
    ensure_admin(caller, "Only admins can manage news")

    with downstream("Failed to create news item", status_code=500):
        row = await datasource.insert(
            "news",
            {
                "news_title": req.title,
                "news_content": req.content,
                "created_by": caller.user_id,
                "created_by_name": caller.name,
            },
        )
    log.info("news.created", news_id=str(row["id"]), user_id=str(caller.user_id))
    return reshape(row)


async def update_news(datasource: DataSource, caller: Caller, item_id: uuid.UUID, req: NewsUpdateRequest) -> dict:
    ensure_admin(caller, "Only admins can manage news")
    row = await _load(datasource, item_id)
    values = {COLUMNS[field]: value for field, value in req.provided().items() if value is not None}
    if values:
        with downstream("Failed to update news item", status_code=500):
            [row] = await datasource.update("news", {"id": item_id}, values)
        log.info("news.updated", news_id=str(item_id), fields=sorted(values))
    return reshape(row)


async def delete_news(datasource: DataSource, caller: Caller, item_id: uuid.UUID) -> None:
    ensure_admin(caller, "Only admins can manage news")
    await _load(datasource, item_id)
    with downstream("Failed to delete news item", status_code=500):
        await datasource.delete("news", {"id": item_id})
    log.info("news.deleted", news_id=str(item_id), user_id=str(caller.user_id))

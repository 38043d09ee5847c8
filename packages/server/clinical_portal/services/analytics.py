"""App usage analytics: per-user open counts and tab views."""

from __future__ import annotations

from typing import Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import downstream
from clinical_portal.core.policy import Caller
from clinical_portal.models.base import utcnow

log = structlog.get_logger()

DEFAULT_SITE = "Unknown"


def most_viewed_tab(tab_views: dict[str, int]) -> Optional[str]:
    """Tab with the most views; on a tie the tab counted later wins."""
    best = None
    for tab in tab_views:
        if best is None or not tab_views[best] > tab_views[tab]:
            best = tab
    return best


async def list_analytics(datasource: DataSource, caller: Caller) -> list[Row]:
    """Every user's row for admins, the caller's own row otherwise."""
    filters = None if caller.is_admin else {"user_id": caller.user_id}
    with downstream("Failed to fetch user analytics"):
        return await datasource.select("user_analytics", filters=filters, order_by=("-total_app_opens",))


async def track(datasource: DataSource, caller: Caller, tab_viewed: Optional[str]) -> Row:
    """Record one app open, and a view of ``tab_viewed`` when given."""
    with downstream("Failed to fetch user analytics"):
        existing = await datasource.fetch_one("user_analytics", {"user_id": caller.user_id})

    now = utcnow()
    if existing is not None:
        tab_views = dict(existing.get("tab_views") or {})
        if tab_viewed:
            tab_views[tab_viewed] = tab_views.get(tab_viewed, 0) + 1
        with downstream("Failed to update analytics"):
            [row] = await datasource.update(
                "user_analytics",
                {"user_id": caller.user_id},
                {
                    "total_app_opens": existing["total_app_opens"] + 1,
                    "last_app_open": now,
                    "tab_views": tab_views,
                    "most_viewed_tab": most_viewed_tab(tab_views),
                },
            )
    else:
        tab_views = {tab_viewed: 1} if tab_viewed else {}
        with downstream("Failed to create analytics"):
            row = await datasource.insert(
                "user_analytics",
                {
                    "user_id": caller.user_id,
                    "user_name": caller.name,
                    "user_email": caller.email,
                    "site": DEFAULT_SITE,
                    "total_app_opens": 1,
                    "last_app_open": now,
                    "tab_views": tab_views,
                    "most_viewed_tab": tab_viewed or None,
                },
            )
    log.debug("analytics.tracked", user_id=str(caller.user_id), tab=tab_viewed)
    return row

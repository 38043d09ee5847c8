"""
Application settings service.

Values are stored as text; ``setting_type`` says how clients should read them
and is enforced on update.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller, ensure_admin

log = structlog.get_logger()


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _check_type(setting_type: str, value: Optional[str]) -> None:
    if value is None:
        return
    if setting_type == "boolean" and value not in ("true", "false"):
        raise PortalError(400, "Invalid value for boolean setting", error="Expected 'true' or 'false'")
    if setting_type == "number":
        try:
            float(value)
        except ValueError:
            raise PortalError(400, "Invalid value for number setting", error=f"{value!r} is not a number")
    if setting_type == "json":
        try:
            json.loads(value)
        except ValueError:
            raise PortalError(400, "Invalid value for json setting", error="Value is not valid JSON")


def _present(row: Row) -> dict:
    return {
        "key": row["setting_key"],
        "value": row.get("setting_value"),
        "type": row["setting_type"],
        "description": row.get("description"),
        "updated_by": row.get("updated_by"),
        "updated_at": row.get("updated_at"),
    }


async def get_settings_map(datasource: DataSource) -> dict[str, dict]:
    """All settings keyed by name."""
    with downstream("Failed to fetch settings"):
        rows = await datasource.select("app_settings", order_by=("setting_key",))
    return {
        row["setting_key"]: {
            "value": row.get("setting_value"),
            "type": row["setting_type"],
            "description": row.get("description"),
        }
        for row in rows
    }


async def update_setting(datasource: DataSource, caller: Caller, key: str, value: Any) -> dict:
    ensure_admin(caller, "Only admins can update settings")
    row = await datasource.fetch_one("app_settings", {"setting_key": key})
    if row is None:
        raise PortalError(404, "Setting not found")

    text = _as_text(value)
    _check_type(row["setting_type"], text)
    with downstream("Failed to update setting"):
        [row] = await datasource.update(
            "app_settings",
            {"setting_key": key},
            {"setting_value": text, "updated_by": caller.user_id},
        )
    log.info("setting.updated", key=key, user_id=str(caller.user_id))
    return _present(row)

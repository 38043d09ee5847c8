"""
In-memory data source for local development and tests.

Rows are built from the SQLModel classes so column defaults match the live
schema. Unique constraints, ``ON DELETE`` behaviour, ``updated_at`` bumps and
the three SQL helper functions are reproduced here; row-level security is not.
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Mapping
from typing import Any, Optional

import structlog

from clinical_portal.core.datasource import DataSource, Row, _model
from clinical_portal.core.errors import UNIQUE_VIOLATION, DataSourceError
from clinical_portal.models.base import utcnow

log = structlog.get_logger()

TRIAL_CONTENT_TABLES = ("enrollments", "news_updates", "training_materials", "study_protocols")

UNIQUE_KEYS: dict[str, tuple[tuple[str, ...], ...]] = {
    "organizations": (("name",),),
    "profiles": (("id",),),
    "user_clinical_assignments": (("user_id", "clinical_trial_id"),),
    "clients": (("email",),),
    "user_analytics": (("user_id",),),
    "app_settings": (("setting_key",),),
}

# parent table -> (child table, referencing column)
CASCADES: dict[str, tuple[tuple[str, str], ...]] = {
    "organizations": (
        ("profiles", "organization_id"),
        ("clinical_trials", "organization_id"),
        ("user_clinical_assignments", "organization_id"),
        ("files", "organization_id"),
    )
    + tuple((table, "organization_id") for table in TRIAL_CONTENT_TABLES),
    "clinical_trials": (
        ("user_clinical_assignments", "clinical_trial_id"),
        ("files", "clinical_trial_id"),
    )
    + tuple((table, "clinical_trial_id") for table in TRIAL_CONTENT_TABLES),
    "profiles": (("user_clinical_assignments", "user_id"),),
}

SET_NULL: dict[str, tuple[tuple[str, str], ...]] = {
    "profiles": (("clinical_trials", "created_by"), ("files", "uploaded_by"))
    + tuple((table, "created_by") for table in TRIAL_CONTENT_TABLES),
}


def _sort_key(column: str):
    # NULLS LAST ascending, NULLS FIRST descending, as Postgres orders them
    return lambda row: (row.get(column) is None, row.get(column))


class MockDataSource(DataSource):
    """Process-local tables held as lists of dicts."""

    def __init__(self):
        self._tables: dict[str, list[Row]] = {}

    def _rows(self, table: str) -> list[Row]:
        _model(table)
        return self._tables.setdefault(table, [])

    @staticmethod
    def _matches(row: Row, filters, within) -> bool:
        for column, value in (filters or {}).items():
            if row.get(column) != value:
                return False
        for column, values in (within or {}).items():
            if row.get(column) not in set(values):
                return False
        return True

    def _check_unique(self, table: str, candidate: Row, ignore: Optional[Row] = None) -> None:
        for columns in UNIQUE_KEYS.get(table, ()):
            key = tuple(candidate.get(c) for c in columns)
            for row in self._rows(table):
                if row is ignore:
                    continue
                if tuple(row.get(c) for c in columns) == key:
                    raise DataSourceError(
                        f'duplicate key value violates unique constraint on {table}({", ".join(columns)})',
                        code=UNIQUE_VIOLATION,
                    )

    # -- synchronous helpers (seeding, tests) -------------------------------

    def add(self, table: str, values: Mapping[str, Any]) -> Row:
        """Insert a row immediately and return a copy of it."""
        model = _model(table)
        row = model(**values).model_dump()
        self._check_unique(table, row)
        self._rows(table).append(row)
        return copy.deepcopy(row)

    def all(self, table: str) -> list[Row]:
        return copy.deepcopy(self._rows(table))

    # -- DataSource ---------------------------------------------------------

    async def select(self, table, *, filters=None, within=None, order_by=(), limit=None):
        rows = [row for row in self._rows(table) if self._matches(row, filters, within)]
        for key in reversed(tuple(order_by)):
            rows.sort(key=_sort_key(key.lstrip("-")), reverse=key.startswith("-"))
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def insert(self, table, values):
        return self.add(table, values)

    async def update(self, table, filters, values):
        updated = []
        for row in self._rows(table):
            if not self._matches(row, filters, None):
                continue
            candidate = {**row, **copy.deepcopy(dict(values))}
            if "updated_at" in row and "updated_at" not in values:
                candidate["updated_at"] = utcnow()
            self._check_unique(table, candidate, ignore=row)
            row.update(candidate)
            updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, table, filters):
        return self._delete_where(table, lambda row: self._matches(row, filters, None))

    def _delete_where(self, table: str, predicate) -> int:
        rows = self._rows(table)
        doomed = [row for row in rows if predicate(row)]
        if not doomed:
            return 0
        self._tables[table] = [row for row in rows if not predicate(row)]
        ids = {row.get("id") for row in doomed}
        for child, column in CASCADES.get(table, ()):
            self._delete_where(child, lambda row, c=column: row.get(c) in ids)
        for child, column in SET_NULL.get(table, ()):
            for row in self._rows(child):
                if row.get(column) in ids:
                    row[column] = None
        return len(doomed)

    async def count(self, table, *, filters=None, within=None):
        return sum(1 for row in self._rows(table) if self._matches(row, filters, within))

    async def rpc(self, name, params):
        handler = getattr(self, f"_rpc_{name}", None)
        if handler is None:
            raise DataSourceError(f"Unknown function: {name}")
        return handler(**params)

    # -- SQL helper functions -----------------------------------------------

    def _profile(self, user_id) -> Optional[Row]:
        for row in self._rows("profiles"):
            if row["id"] == user_id:
                return row
        return None

    def _rpc_get_user_accessible_trials(self, user_id: uuid.UUID) -> list[Row]:
        profile = self._profile(user_id)
        if profile is None:
            return []
        org_id = profile["organization_id"]
        trials = [t for t in self._rows("clinical_trials") if t["organization_id"] == org_id]
        if profile["role"] != "admin":
            assigned = {
                a["clinical_trial_id"]
                for a in self._rows("user_clinical_assignments")
                if a["user_id"] == user_id and a["organization_id"] == org_id
            }
            trials = [t for t in trials if t["id"] in assigned]
        return [{"id": t["id"], "name": t["name"]} for t in trials]

    def _rpc_create_profile_and_assignments(
        self,
        admin_user_id: uuid.UUID,
        new_user_auth_id: uuid.UUID,
        new_user_role: str,
        new_user_display_name: Optional[str] = None,
        selected_clinical_trial_id: Optional[uuid.UUID] = None,
    ) -> dict:
        admin = self._profile(admin_user_id)
        if admin is None or admin["role"] != "admin":
            return {"success": False, "error": "Only admins can create users"}
        if self._profile(new_user_auth_id) is not None:
            return {"success": False, "error": "User profile already exists"}
        org_id = admin["organization_id"]
        if selected_clinical_trial_id is not None:
            trial = next(
                (t for t in self._rows("clinical_trials") if t["id"] == selected_clinical_trial_id),
                None,
            )
            if trial is None or trial["organization_id"] != org_id:
                return {"success": False, "error": "Clinical trial not found in your organization"}
        self.add(
            "profiles",
            {
                "id": new_user_auth_id,
                "organization_id": org_id,
                "role": new_user_role,
                "display_name": new_user_display_name,
            },
        )
        if selected_clinical_trial_id is not None:
            self.add(
                "user_clinical_assignments",
                {
                    "user_id": new_user_auth_id,
                    "clinical_trial_id": selected_clinical_trial_id,
                    "organization_id": org_id,
                },
            )
        return {
            "success": True,
            "profile_id": str(new_user_auth_id),
            "trial_assigned": selected_clinical_trial_id is not None,
        }

    def _rpc_get_organization_stats(self, org_id: uuid.UUID) -> dict:
        def count(table: str, **extra) -> int:
            return sum(
                1
                for row in self._rows(table)
                if row.get("organization_id") == org_id
                and all(row.get(k) == v for k, v in extra.items())
            )

        return {
            "totalUsers": count("profiles"),
            "totalTrials": count("clinical_trials"),
            "activeTrials": count("clinical_trials", is_active=True),
            "totalEnrollments": count("enrollments"),
            "totalNewsUpdates": count("news_updates"),
            "totalTrainingMaterials": count("training_materials"),
            "totalStudyProtocols": count("study_protocols"),
        }

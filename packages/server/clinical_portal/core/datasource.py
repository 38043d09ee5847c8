"""
Data source abstraction.

Services talk to tables through a ``DataSource`` rather than a raw session so
that the same business logic runs against Postgres (``LiveDataSource``) or the
in-memory development backend (``MockDataSource``). Rows travel as plain dicts
keyed by column name.

Ordering keys are column names, prefixed with ``-`` for descending order.
"""

from __future__ import annotations

import json
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

import structlog
from sqlalchemy import delete, func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from clinical_portal.core.errors import DataSourceError
from clinical_portal.models import TABLES

log = structlog.get_logger()

Row = dict[str, Any]
Filters = Optional[Mapping[str, Any]]
Within = Optional[Mapping[str, Iterable[Any]]]


class DataSource(ABC):
    """Table-level operations used by the services."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Filters = None,
        within: Within = None,
        order_by: Sequence[str] = (),
        limit: Optional[int] = None,
    ) -> list[Row]:
        """Rows matching every equality filter and every ``within`` membership test."""

    async def fetch_one(self, table: str, filters: Mapping[str, Any]) -> Optional[Row]:
        rows = await self.select(table, filters=filters, limit=1)
        return rows[0] if rows else None

    @abstractmethod
    async def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        """Insert one row and return it with defaults applied."""

    @abstractmethod
    async def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> list[Row]:
        """Update matching rows and return them."""

    @abstractmethod
    async def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        """Delete matching rows (cascading as the schema does). Returns the count."""

    @abstractmethod
    async def count(self, table: str, *, filters: Filters = None, within: Within = None) -> int:
        ...

    @abstractmethod
    async def rpc(self, name: str, params: Mapping[str, Any]) -> Any:
        """Call one of the SQL helper functions."""

    async def bind_identity(self, user_id: uuid.UUID) -> None:
        """Associate the remaining work with an authenticated user (row-level security)."""


async def attach(
    datasource: DataSource,
    rows: list[Row],
    *,
    table: str,
    key: str,
    name: str,
    columns: Sequence[str],
) -> list[Row]:
    """Embed the related ``table`` row referenced by ``row[key]`` under ``row[name]``.

    Only ``columns`` of the related row are kept; a dangling reference embeds None.
    """
    ids = {row[key] for row in rows if row.get(key) is not None}
    related: dict[Any, Row] = {}
    if ids:
        for item in await datasource.select(table, within={"id": ids}):
            related[item["id"]] = {column: item.get(column) for column in columns}
    for row in rows:
        row[name] = related.get(row.get(key))
    return rows


def _model(table: str) -> type[SQLModel]:
    try:
        return TABLES[table]
    except KeyError:
        raise DataSourceError(f"Unknown table: {table}")


# ---------------------------------------------------------------------------
# Live (Postgres via SQLModel / asyncpg)
# ---------------------------------------------------------------------------

# name -> (result shape, statement)
RPC_STATEMENTS = {
    "get_user_accessible_trials": (
        "rows",
        "SELECT id, name FROM get_user_accessible_trials(CAST(:user_id AS uuid))",
    ),
    "get_organization_stats": (
        "scalar",
        "SELECT get_organization_stats(CAST(:org_id AS uuid))",
    ),
    "create_profile_and_assignments": (
        "scalar",
        "SELECT create_profile_and_assignments("
        "CAST(:admin_user_id AS uuid), CAST(:new_user_auth_id AS uuid), "
        "CAST(:new_user_role AS text), CAST(:new_user_display_name AS text), "
        "CAST(:selected_clinical_trial_id AS uuid))",
    ),
}


class LiveDataSource(DataSource):
    """Runs every operation inside the request's ``AsyncSession``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _where(stmt, model, filters: Filters, within: Within):
        for column, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, column) == value)
        for column, values in (within or {}).items():
            stmt = stmt.where(getattr(model, column).in_(list(values)))
        return stmt

    async def _execute(self, stmt, params: Optional[Mapping[str, Any]] = None):
        try:
            return await self.session.execute(stmt, params)
        except IntegrityError as exc:
            code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
            raise DataSourceError(str(exc.orig), code=code) from exc
        except SQLAlchemyError as exc:
            raise DataSourceError(str(exc)) from exc

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
            raise DataSourceError(str(exc.orig), code=code) from exc
        except SQLAlchemyError as exc:
            raise DataSourceError(str(exc)) from exc

    async def select(self, table, *, filters=None, within=None, order_by=(), limit=None):
        model = _model(table)
        stmt = self._where(select(model), model, filters, within)
        for key in order_by:
            column = getattr(model, key.lstrip("-"))
            stmt = stmt.order_by(column.desc() if key.startswith("-") else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(stmt)
        return [row.model_dump() for row in result.scalars().all()]

    async def insert(self, table, values):
        model = _model(table)
        obj = model(**values)
        self.session.add(obj)
        await self._flush()
        await self.session.refresh(obj)
        return obj.model_dump()

    async def update(self, table, filters, values):
        model = _model(table)
        result = await self._execute(self._where(select(model), model, filters, None))
        rows = result.scalars().all()
        for row in rows:
            for column, value in values.items():
                setattr(row, column, value)
            self.session.add(row)
        await self._flush()
        for row in rows:
            await self.session.refresh(row)
        return [row.model_dump() for row in rows]

    async def delete(self, table, filters):
        model = _model(table)
        result = await self._execute(self._where(delete(model), model, filters, None))
        return result.rowcount or 0

    async def count(self, table, *, filters=None, within=None):
        model = _model(table)
        stmt = self._where(select(func.count()).select_from(model), model, filters, within)
        result = await self._execute(stmt)
        return int(result.scalar_one())

    async def rpc(self, name, params):
        try:
            shape, statement = RPC_STATEMENTS[name]
        except KeyError:
            raise DataSourceError(f"Unknown function: {name}")
        result = await self._execute(text(statement), dict(params))
        if shape == "rows":
            return [dict(row._mapping) for row in result.all()]
        value = result.scalar_one_or_none()
        if isinstance(value, str):
            value = json.loads(value)
        return value

    async def bind_identity(self, user_id):
        claims = json.dumps({"sub": str(user_id), "role": "authenticated"})
        await self._execute(
            text("SELECT set_config('request.jwt.claims', :claims, true)"),
            {"claims": claims},
        )

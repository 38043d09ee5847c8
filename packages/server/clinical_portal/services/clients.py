"""Client directory service."""

from __future__ import annotations

import uuid

import structlog

from clinical_portal.core.datasource import DataSource, Row
from clinical_portal.core.errors import PortalError, downstream
from clinical_portal.core.policy import Caller
from clinical_portal_shared.schemas.resources import ClientCreateRequest, ClientUpdateRequest

log = structlog.get_logger()


async def _load(datasource: DataSource, client_id: uuid.UUID) -> Row:
    row = await datasource.fetch_one("clients", {"id": client_id})
    if row is None:
        raise PortalError(404, "Client not found")
    return row


async def list_clients(datasource: DataSource) -> list[Row]:
    with downstream("Failed to fetch clients"):
        return await datasource.select("clients", order_by=("-created_at",))


async def get_client(datasource: DataSource, client_id: uuid.UUID) -> Row:
    return await _load(datasource, client_id)


async def create_client(datasource: DataSource, caller: Caller, req: ClientCreateRequest) -> Row:
    if not req.name or not req.email:
        raise PortalError(400, "Name and email are required")
    with downstream("Failed to create client"):
        row = await datasource.insert(
            "clients",
            {
                "name": req.name,
                "email": str(req.email).lower(),
                "company": req.company,
                "phone": req.phone,
                "status": req.status.value,
                "created_by": caller.user_id,
            },
        )
    log.info("client.created", client_id=str(row["id"]), user_id=str(caller.user_id))
    return row


async def update_client(datasource: DataSource, caller: Caller, client_id: uuid.UUID, req: ClientUpdateRequest) -> Row:
    row = await _load(datasource, client_id)
    values = {}
    for field, value in req.provided().items():
        if value is None:
            continue
        if field == "email":
            value = str(value).lower()
        elif field == "status":
            value = value.value
        values[field] = value
    if values:
        with downstream("Failed to update client"):
            [row] = await datasource.update("clients", {"id": client_id}, values)
        log.info("client.updated", client_id=str(client_id), user_id=str(caller.user_id), fields=sorted(values))
    return row


async def delete_client(datasource: DataSource, caller: Caller, client_id: uuid.UUID) -> None:
    await _load(datasource, client_id)
    with downstream("Failed to delete client"):
        await datasource.delete("clients", {"id": client_id})
    log.info("client.deleted", client_id=str(client_id), user_id=str(caller.user_id))

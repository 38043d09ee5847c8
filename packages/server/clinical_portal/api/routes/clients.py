"""
Client directory API endpoints.

GET    /api/clients            List clients
POST   /api/clients            Create a client
GET    /api/clients/{clientId} Get a client
PUT    /api/clients/{clientId} Update a client
DELETE /api/clients/{clientId} Delete a client
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import clients as client_service
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.resources import (
    ClientCreateRequest,
    ClientListResponse,
    ClientResponse,
    ClientSavedResponse,
    ClientUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=ClientListResponse)
async def list_clients(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "clients": await client_service.list_clients(datasource)}


@router.post("", response_model=ClientSavedResponse, status_code=201)
async def create_client(
    body: ClientCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    client = await client_service.create_client(datasource, caller, body)
    return {"success": True, "message": "Client created successfully", "client": client}


@router.get("/{clientId}", response_model=ClientResponse)
async def get_client(
    clientId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "client": await client_service.get_client(datasource, clientId)}


@router.put("/{clientId}", response_model=ClientSavedResponse)
async def update_client(
    clientId: uuid.UUID,
    body: ClientUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    client = await client_service.update_client(datasource, caller, clientId, body)
    return {"success": True, "message": "Client updated successfully", "client": client}


@router.delete("/{clientId}", response_model=MessageResponse)
async def delete_client(
    clientId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await client_service.delete_client(datasource, caller, clientId)
    return {"success": True, "message": "Client deleted successfully"}

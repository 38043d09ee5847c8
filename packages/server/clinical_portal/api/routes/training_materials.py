"""
Training material API endpoints.

GET    /api/training-materials                List training materials for accessible trials (optionally one trial)
POST   /api/training-materials                Add to an accessible trial
GET    /api/training-materials/{itemId}       Get one
PUT    /api/training-materials/{itemId}       Update
DELETE /api/training-materials/{itemId}       Delete
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
from clinical_portal.services.content import TRAINING_MATERIALS
from clinical_portal_shared.schemas.common import MessageResponse
from clinical_portal_shared.schemas.content import (
    TrainingMaterialCreateRequest,
    TrainingMaterialListResponse,
    TrainingMaterialResponse,
    TrainingMaterialSavedResponse,
    TrainingMaterialUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=TrainingMaterialListResponse)
async def list_training_materials(
    clinicalTrialId: Optional[uuid.UUID] = Query(None),
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    rows = await content_service.list_content(datasource, caller, TRAINING_MATERIALS, clinicalTrialId)
    return {"success": True, "trainingMaterials": rows}


@router.post("", response_model=TrainingMaterialSavedResponse, status_code=201)
async def create_training_material(
    body: TrainingMaterialCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.create_content(datasource, caller, TRAINING_MATERIALS, body)
    return {"success": True, "message": "Training material created successfully", "trainingMaterial": row}


@router.get("/{itemId}", response_model=TrainingMaterialResponse)
async def get_training_material(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.get_content(datasource, caller, TRAINING_MATERIALS, itemId)
    return {"success": True, "trainingMaterial": row}


@router.put("/{itemId}", response_model=TrainingMaterialSavedResponse)
async def update_training_material(
    itemId: uuid.UUID,
    body: TrainingMaterialUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    row = await content_service.update_content(datasource, caller, TRAINING_MATERIALS, itemId, body)
    return {"success": True, "message": "Training material updated successfully", "trainingMaterial": row}


@router.delete("/{itemId}", response_model=MessageResponse)
async def delete_training_material(
    itemId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await content_service.delete_content(datasource, caller, TRAINING_MATERIALS, itemId)
    return {"success": True, "message": "Training material deleted successfully"}

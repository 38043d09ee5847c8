"""
Clinical Trial API endpoints.

GET    /api/clinical-trials                                   List accessible trials
POST   /api/clinical-trials                                   Create a trial (admin)
GET    /api/clinical-trials/{trialId}                         Get a trial
PUT    /api/clinical-trials/{trialId}                         Update a trial (admin)
DELETE /api/clinical-trials/{trialId}                         Delete a trial and its content (admin)
GET    /api/clinical-trials/{trialId}/assignments             List assigned users (admin)
POST   /api/clinical-trials/{trialId}/assignments             Assign a user (admin)
DELETE /api/clinical-trials/{trialId}/assignments/{userId}    Remove an assignment (admin)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from clinical_portal.core.auth import get_caller
from clinical_portal.core.backends import get_datasource
from clinical_portal.core.datasource import DataSource
from clinical_portal.core.policy import Caller
from clinical_portal.services import clinical_trials as trial_service
from clinical_portal_shared.schemas.clinical_trials import (
    AssignmentCreateRequest,
    AssignmentListResponse,
    AssignmentSavedResponse,
    ClinicalTrialCreateRequest,
    ClinicalTrialUpdateRequest,
    TrialListResponse,
    TrialResponse,
    TrialSavedResponse,
)
from clinical_portal_shared.schemas.common import MessageResponse

router = APIRouter()


@router.get("", response_model=TrialListResponse)
async def list_trials(
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    """Admins see every trial of their organization; others see their assigned trials."""
    return {"success": True, "trials": await trial_service.list_trials(datasource, caller)}


@router.post("", response_model=TrialSavedResponse, status_code=201)
async def create_trial(
    body: ClinicalTrialCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    trial = await trial_service.create_trial(datasource, caller, body)
    return {"success": True, "message": "Clinical trial created successfully", "trial": trial}


@router.get("/{trialId}", response_model=TrialResponse)
async def get_trial(
    trialId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    return {"success": True, "trial": await trial_service.get_trial(datasource, caller, trialId)}


@router.put("/{trialId}", response_model=TrialSavedResponse)
async def update_trial(
    trialId: uuid.UUID,
    body: ClinicalTrialUpdateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    trial = await trial_service.update_trial(datasource, caller, trialId, body)
    return {"success": True, "message": "Clinical trial updated successfully", "trial": trial}


@router.delete("/{trialId}", response_model=MessageResponse)
async def delete_trial(
    trialId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await trial_service.delete_trial(datasource, caller, trialId)
    return {"success": True, "message": "Clinical trial deleted successfully"}


@router.get("/{trialId}/assignments", response_model=AssignmentListResponse)
async def list_assignments(
    trialId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    assignments = await trial_service.list_assignments(datasource, caller, trialId)
    return {"success": True, "assignments": assignments}


@router.post("/{trialId}/assignments", response_model=AssignmentSavedResponse, status_code=201)
async def assign_user(
    trialId: uuid.UUID,
    body: AssignmentCreateRequest,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    assignment = await trial_service.assign_user(datasource, caller, trialId, body)
    return {"success": True, "message": "User assigned successfully", "assignment": assignment}


@router.delete("/{trialId}/assignments/{userId}", response_model=MessageResponse)
async def unassign_user(
    trialId: uuid.UUID,
    userId: uuid.UUID,
    caller: Caller = Depends(get_caller),
    datasource: DataSource = Depends(get_datasource),
):
    await trial_service.unassign_user(datasource, caller, trialId, userId)
    return {"success": True, "message": "Assignment removed successfully"}

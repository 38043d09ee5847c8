"""Clinical trial and assignment schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel, Envelope, Record


class ClinicalTrialCreateRequest(CamelModel):
    name: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = None
    is_active: bool = True


class ClinicalTrialUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class AssignmentCreateRequest(CamelModel):
    user_id: UUID


class TrialRecord(Record):
    name: str
    description: Optional[str] = None
    is_active: bool
    organization_id: UUID
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    organizations: Optional[dict[str, Any]] = None


class TrialListResponse(Envelope):
    trials: list[TrialRecord]


class TrialResponse(Envelope):
    trial: TrialRecord


class TrialSavedResponse(TrialResponse):
    message: str


class AssignmentRecord(Record):
    """An assignment row; listings also embed ``profiles`` (id, display_name, role)."""
    user_id: UUID
    clinical_trial_id: UUID
    organization_id: UUID


class AssignmentListResponse(Envelope):
    assignments: list[AssignmentRecord]


class AssignmentSavedResponse(Envelope):
    message: str
    assignment: AssignmentRecord

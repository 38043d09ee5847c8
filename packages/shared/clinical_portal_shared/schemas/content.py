"""Trial-scoped content schemas (enrollments, news updates, training materials, study protocols, files)."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel, Envelope, Record


class EnrollmentCreateRequest(CamelModel):
    clinical_trial_id: Optional[UUID] = None
    participant_name: Optional[str] = None
    enrollment_date: Optional[date] = None
    notes: Optional[str] = None
    storage_path: Optional[str] = None


class EnrollmentUpdateRequest(CamelModel):
    participant_name: Optional[str] = Field(default=None, min_length=1)
    enrollment_date: Optional[date] = None
    notes: Optional[str] = None
    storage_path: Optional[str] = None


class NewsUpdateCreateRequest(CamelModel):
    clinical_trial_id: Optional[UUID] = None
    title: Optional[str] = None
    body: Optional[str] = None
    storage_path: Optional[str] = None


class NewsUpdateUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    body: Optional[str] = Field(default=None, min_length=1)
    storage_path: Optional[str] = None


class TrainingMaterialCreateRequest(CamelModel):
    clinical_trial_id: Optional[UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    storage_path: Optional[str] = None


class TrainingMaterialUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    storage_path: Optional[str] = None


class StudyProtocolCreateRequest(CamelModel):
    clinical_trial_id: Optional[UUID] = None
    title: Optional[str] = None
    version: Optional[str] = None
    storage_path: Optional[str] = None


class StudyProtocolUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    version: Optional[str] = None
    storage_path: Optional[str] = None


class FileCreateRequest(CamelModel):
    clinical_trial_id: Optional[UUID] = None
    bucket: str = Field(min_length=1)
    path: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    file_size: Optional[int] = Field(default=None, ge=0)
    mime_type: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ContentRecord(Record):
    """Trial content row with ``clinical_trials`` (id, name) and ``profiles`` (creator) embedded."""
    organization_id: UUID
    clinical_trial_id: UUID
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    clinical_trials: Optional[dict[str, Any]] = None
    profiles: Optional[dict[str, Any]] = None


class EnrollmentRecord(ContentRecord):
    participant_name: str
    enrollment_date: date
    notes: Optional[str] = None


class EnrollmentListResponse(Envelope):
    enrollments: list[EnrollmentRecord]


class EnrollmentResponse(Envelope):
    enrollment: EnrollmentRecord


class EnrollmentSavedResponse(EnrollmentResponse):
    message: str


class NewsUpdateRecord(ContentRecord):
    title: str
    body: str
    published_at: Optional[datetime] = None


class NewsUpdateListResponse(Envelope):
    news_updates: list[NewsUpdateRecord]


class NewsUpdateResponse(Envelope):
    news_update: NewsUpdateRecord


class NewsUpdateSavedResponse(NewsUpdateResponse):
    message: str


class TrainingMaterialRecord(ContentRecord):
    title: str
    description: Optional[str] = None


class TrainingMaterialListResponse(Envelope):
    training_materials: list[TrainingMaterialRecord]


class TrainingMaterialResponse(Envelope):
    training_material: TrainingMaterialRecord


class TrainingMaterialSavedResponse(TrainingMaterialResponse):
    message: str


class StudyProtocolRecord(ContentRecord):
    title: str
    version: Optional[str] = None


class StudyProtocolListResponse(Envelope):
    study_protocols: list[StudyProtocolRecord]


class StudyProtocolResponse(Envelope):
    study_protocol: StudyProtocolRecord


class StudyProtocolSavedResponse(StudyProtocolResponse):
    message: str


class FileRecord(Record):
    organization_id: UUID
    clinical_trial_id: Optional[UUID] = None
    bucket: str
    path: str
    file_name: str
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    uploaded_by: Optional[UUID] = None
    uploaded_at: Optional[datetime] = None


class FileListResponse(Envelope):
    files: list[FileRecord]


class FileSavedResponse(Envelope):
    message: str
    file: FileRecord

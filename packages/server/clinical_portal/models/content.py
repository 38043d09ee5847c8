"""Trial-scoped content: enrollments, news updates, training materials, study protocols, files."""

import uuid
from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, utcnow


class TrialContentMixin(SQLModel):
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )
    clinical_trial_id: uuid.UUID = Field(
        foreign_key="clinical_trials.id", ondelete="CASCADE", nullable=False, index=True
    )
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id", ondelete="SET NULL")


class Enrollment(UUIDMixin, TrialContentMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "enrollments"

    participant_name: str = Field(nullable=False)
    enrollment_date: date = Field(nullable=False)
    notes: Optional[str] = None
    storage_path: Optional[str] = None


class NewsUpdate(UUIDMixin, TrialContentMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "news_updates"

    title: str = Field(nullable=False)
    body: str = Field(nullable=False)
    published_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    storage_path: Optional[str] = None


class TrainingMaterial(UUIDMixin, TrialContentMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "training_materials"

    title: str = Field(nullable=False)
    description: Optional[str] = None
    storage_path: Optional[str] = None


class StudyProtocol(UUIDMixin, TrialContentMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "study_protocols"

    title: str = Field(nullable=False)
    version: Optional[str] = None
    storage_path: Optional[str] = None


class FileRecord(UUIDMixin, SQLModel, table=True):
    """Index row for an object held in external storage."""

    __tablename__ = "files"

    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )
    clinical_trial_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="clinical_trials.id", ondelete="CASCADE", index=True
    )
    bucket: str = Field(nullable=False)
    path: str = Field(nullable=False)
    uploaded_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id", ondelete="SET NULL")
    file_name: str = Field(nullable=False)
    file_size: Optional[int] = Field(default=None, sa_type=sa.BigInteger)
    mime_type: Optional[str] = None
    uploaded_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.text("now()")},
        sa_type=sa.DateTime(timezone=True),
    )

"""Clinical trial and trial assignment models."""

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, TimestampMixin, UUIDMixin


class ClinicalTrial(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "clinical_trials"

    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )
    name: str = Field(nullable=False)
    description: Optional[str] = None
    is_active: bool = Field(default=True, nullable=False)
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="profiles.id", ondelete="SET NULL")


class UserClinicalAssignment(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    """Grants a non-admin profile access to one trial's content."""

    __tablename__ = "user_clinical_assignments"
    __table_args__ = (sa.UniqueConstraint("user_id", "clinical_trial_id"),)

    user_id: uuid.UUID = Field(foreign_key="profiles.id", ondelete="CASCADE", nullable=False, index=True)
    clinical_trial_id: uuid.UUID = Field(
        foreign_key="clinical_trials.id", ondelete="CASCADE", nullable=False, index=True
    )
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )

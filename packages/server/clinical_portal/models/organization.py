"""Organization (tenant) and profile models."""

import uuid
from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(unique=True, nullable=False)


class Profile(TimestampMixin, SQLModel, table=True):
    """Application-level user record. ``id`` is the identity provider's user id."""

    __tablename__ = "profiles"

    id: uuid.UUID = Field(primary_key=True, nullable=False)
    organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", ondelete="CASCADE", nullable=False, index=True
    )
    role: str = Field(default="user", nullable=False)
    display_name: Optional[str] = None

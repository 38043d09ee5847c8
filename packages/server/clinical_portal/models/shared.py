"""Tables shared by every tenant: hospitals, global news, PDFs, clients, analytics, settings."""

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, utcnow


class Hospital(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "hospitals"

    hospital_name: str = Field(nullable=False)
    location: str = Field(nullable=False)
    principal_investigator: str = Field(nullable=False)
    consented_patients: int = Field(default=0, nullable=False)
    randomized_patients: int = Field(default=0, nullable=False)
    consented_rate: Optional[float] = Field(default=None, sa_type=sa.Numeric(5, 2, asdecimal=False))


class NewsItem(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "news"

    news_title: str = Field(nullable=False)
    news_content: str = Field(nullable=False)
    created_by: Optional[uuid.UUID] = None
    created_by_name: Optional[str] = None
    created_date: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    is_active: bool = Field(default=True, nullable=False)


class PdfDocument(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "pdf_documents"

    title: str = Field(nullable=False)
    description: Optional[str] = None
    category: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(default=None, sa_type=sa.BigInteger)
    uploaded_by: Optional[uuid.UUID] = None
    uploaded_by_name: Optional[str] = None
    upload_date: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    is_active: bool = Field(default=True, nullable=False)


class Client(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "clients"

    name: str = Field(nullable=False)
    email: str = Field(unique=True, nullable=False)
    company: Optional[str] = None
    phone: Optional[str] = None
    status: str = Field(default="active", nullable=False)
    created_by: Optional[uuid.UUID] = None


class UserAnalytics(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "user_analytics"

    user_id: uuid.UUID = Field(unique=True, nullable=False)
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    site: Optional[str] = None
    total_app_opens: int = Field(default=0, nullable=False)
    last_app_open: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    tab_views: dict = Field(default_factory=dict, sa_type=JSONB, nullable=False)
    most_viewed_tab: Optional[str] = None


class AppSetting(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "app_settings"

    setting_key: str = Field(unique=True, nullable=False)
    setting_value: Optional[str] = None
    setting_type: str = Field(default="string", nullable=False)
    description: Optional[str] = None
    updated_by: Optional[uuid.UUID] = None

"""Schemas for the global resources: hospitals, news, PDFs, clients, settings, analytics."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .common import CamelModel, ClientStatus, Envelope, Record


class HospitalCreateRequest(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    principal_investigator: Optional[str] = None
    consented_patients: int = Field(default=0, ge=0)
    randomized_patients: int = Field(default=0, ge=0)
    consent_rate: Optional[float] = Field(default=None, ge=0, le=100)


class HospitalUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    principal_investigator: Optional[str] = Field(default=None, min_length=1)
    consented_patients: Optional[int] = Field(default=None, ge=0)
    randomized_patients: Optional[int] = Field(default=None, ge=0)
    consent_rate: Optional[float] = Field(default=None, ge=0, le=100)


class NewsCreateRequest(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None


class NewsUpdateRequest(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class PdfCreateRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)


class ClientCreateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE


class ClientUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[ClientStatus] = None


class SettingUpdateRequest(CamelModel):
    value: Union[str, bool, int, float, None] = None


class AnalyticsTrackRequest(CamelModel):
    tab_viewed: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class HospitalRecord(Record):
    name: Optional[str] = None
    location: Optional[str] = None
    principal_investigator: Optional[str] = None
    consented_patients: Optional[int] = None
    randomized_patients: Optional[int] = None
    consent_rate: Optional[float] = None
    created_at: Optional[datetime] = None


class HospitalSummary(CamelModel):
    total_consented: int
    total_randomized: int
    total_hospitals: int


class HospitalListResponse(Envelope):
    hospitals: list[HospitalRecord]
    summary: HospitalSummary


class HospitalResponse(Envelope):
    hospital: HospitalRecord


class HospitalSavedResponse(HospitalResponse):
    message: str


class NewsRecord(Record):
    title: str
    content: str
    created_by: Optional[UUID] = None
    created_by_name: Optional[str] = None
    date: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None


class NewsListResponse(Envelope):
    news_items: list[NewsRecord]


class NewsSavedResponse(Envelope):
    message: str
    news_item: NewsRecord


class PdfRecord(Record):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_by: Optional[UUID] = None
    uploaded_by_name: Optional[str] = None
    upload_date: Optional[datetime] = None
    is_active: bool


class PdfListResponse(Envelope):
    pdf_documents: list[PdfRecord]


class PdfSavedResponse(Envelope):
    message: str
    pdf_document: PdfRecord


class ClientRecord(Record):
    name: str
    email: str
    company: Optional[str] = None
    phone: Optional[str] = None
    status: str
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClientListResponse(Envelope):
    clients: list[ClientRecord]


class ClientResponse(Envelope):
    client: ClientRecord


class ClientSavedResponse(ClientResponse):
    message: str


class SettingValue(BaseModel):
    value: Optional[str] = None
    type: str
    description: Optional[str] = None


class SettingsResponse(Envelope):
    settings: dict[str, SettingValue]


class SettingRecord(SettingValue):
    key: str
    updated_by: Optional[UUID] = None
    updated_at: Optional[datetime] = None


class SettingSavedResponse(Envelope):
    message: str
    setting: SettingRecord


class AnalyticsRecord(Record):
    user_id: UUID
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    site: Optional[str] = None
    total_app_opens: int
    last_app_open: Optional[datetime] = None
    tab_views: dict[str, int] = {}
    most_viewed_tab: Optional[str] = None


class AnalyticsListResponse(Envelope):
    analytics: list[AnalyticsRecord]


class AnalyticsSavedResponse(Envelope):
    message: str
    analytics: AnalyticsRecord


class DashboardStats(CamelModel):
    total_users: int
    total_trials: int
    active_trials: int
    total_enrollments: int
    total_news_updates: int
    total_training_materials: int
    total_study_protocols: int
    accessible_trials: int
    user_role: str


class DashboardResponse(Envelope):
    stats: DashboardStats

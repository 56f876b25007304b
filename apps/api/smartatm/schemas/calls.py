"""Schemas for the calls screen and call detail."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .callbacks import CallbackOut
from .common import PageParams, SortOrder


class CallFilters(PageParams):
    search: str | None = None
    disposition: str | None = None
    has_pca: bool | None = None
    date_from: date | None = None
    date_to: date | None = None
    call_ids: list[str] = Field(default_factory=list)
    sort_by: str = "call_id"
    sort_order: SortOrder = "desc"


class CallRow(BaseModel):
    """A call enriched with its newest PCA, callbacks and lead."""

    model_config = ConfigDict(from_attributes=True)

    call_id: str
    agent_name: str | None = None
    disposition: str | None = None
    business_name: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    owner_email: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    location_type: str | None = None
    agreed_amount: float | None = None
    monthly_amount: float | None = None
    yearly_amount: float | None = None
    company_key: str | None = None
    from_number: str | None = None
    to_number: str | None = None
    call_successful: bool | None = None
    created_at: datetime | None = None
    duration_ms: int | None = None
    disconnection_reason: str | None = None
    has_pca: bool = False
    has_callbacks: bool = False
    lead_phone: str | None = None


class CallDetail(CallRow):
    lead_business_name: str | None = None
    lead_owner_name: str | None = None


class PCAOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    call_id: str
    agent_name: str | None = None
    disposition: str | None = None
    call_successful: bool | None = None
    user_sentiment: str | None = None
    duration_ms: int | None = None
    start_timestamp: datetime | None = None
    end_timestamp: datetime | None = None
    disconnection_reason: str | None = None
    call_summary: str | None = None
    transcript: str | None = None
    recording_url: str | None = None
    recording_multi_channel_url: str | None = None
    public_log_url: str | None = None
    call_cost: float | None = None
    analysis: dict[str, Any] | None = None
    custom_analysis_data: dict[str, Any] | None = None
    created_at: datetime | None = None


class CallDetailResponse(BaseModel):
    call: CallDetail
    pca: list[PCAOut]
    is_callback: bool
    callback: CallbackOut | None = None


class PendingCallbackFilters(PageParams):
    search: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class PendingCallbackRow(BaseModel):
    call_id: str
    to_number: str | None = None
    agent_name: str | None = None
    business_name: str | None = None
    disposition: str | None = None
    created_at: datetime | None = None


class HistoryInfo(BaseModel):
    has_history: bool
    count: int
    phone_number: str | None = None

"""Schemas for the aggregated leads screen and the lead directory."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import PageParams, SortOrder


class LeadFilters(PageParams):
    search: str | None = None
    disposition: str | None = None
    min_calls: int | None = Field(default=None, ge=0)
    has_agreed_amount: Literal["all", "yes", "no"] = "all"
    sort_by: Literal["business_name", "owner_name", "total_calls", "agreed_amount", "last_call_date"] = "last_call_date"
    sort_order: SortOrder = "desc"


class LeadSummary(BaseModel):
    phone_number: str
    to_number: str
    business_name: str | None = None
    owner_name: str | None = None
    owner_email: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    total_calls: int
    last_call_id: str
    last_call_date: datetime | None = None
    last_disposition: str | None = None
    agreed_amount: float | None = None


class DirectoryFilters(PageParams):
    search: str | None = None
    only_with_callbacks: bool = False
    sort_by: Literal["business_name", "owner_name", "last_call_date"] = "business_name"
    sort_order: SortOrder = "asc"


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phone_number: str
    business_name: str | None = None
    owner_name: str | None = None
    email: str | None = None
    address: str | None = None
    location_type: str | None = None
    timezone: str | None = None
    last_call_date: datetime | None = None
    callbacks_count: int = 0

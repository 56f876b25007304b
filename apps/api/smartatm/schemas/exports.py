"""Schemas for lead export."""
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from .common import PageParams


class ExportFilters(PageParams):
    date_from: date | None = None
    date_to: date | None = None
    omit_dispositions: list[str] = Field(default_factory=list)
    min_calls: int = Field(default=0, ge=0)
    omit_callbacks: bool = False


class ExportPreviewRow(BaseModel):
    phone_number: str
    business_name: str | None = None
    address: str | None = None
    customer_phone: str
    timezone: str | None = None
    calls_count: int

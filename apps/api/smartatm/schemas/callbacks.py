"""Schemas for callback listing and management."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from .common import PageParams


class CallbackFilters(PageParams):
    search: str | None = None
    disposition: str | None = None
    owner: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class CallbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    call_id: str | None = None
    lead_id: str | None = None
    agent_id: str | None = None
    disposition: str | None = None
    callback_owner_name: str | None = None
    callback_owner_phone: str | None = None
    callback_time: datetime | None = None
    callback_time_text_raw: str | None = None
    callback_window_note: str | None = None
    caller_tz: str | None = None
    tz_ambiguous: bool | None = None
    from_number: str | None = None
    to_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CallbackRow(CallbackOut):
    business_name: str | None = None


class CallbackCreate(BaseModel):
    id: str | None = None
    call_id: str | None = None
    lead_id: str | None = None
    agent_id: str | None = None
    disposition: str | None = None
    callback_owner_name: str | None = None
    callback_owner_phone: str | None = None
    callback_time: datetime | None = None
    callback_time_text_raw: str | None = None
    callback_window_note: str | None = None
    caller_tz: str | None = None
    from_number: str | None = None
    to_number: str | None = None


class CallbackUpdate(BaseModel):
    disposition: str | None = None
    callback_owner_name: str | None = None
    callback_owner_phone: str | None = None
    callback_time: datetime | None = None
    callback_time_text_raw: str | None = None
    callback_window_note: str | None = None
    caller_tz: str | None = None
    to_number: str | None = None

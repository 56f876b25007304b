"""Schemas for the per-phone call history."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class InteractionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: Literal["call", "callback"]
    date: datetime | str | None = None
    display_date: datetime | str | None = None
    call_id: str | None = None
    id: str | None = None
    disposition: str | None = None
    business_name: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    agreed_amount: float | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    callback_time: datetime | None = None
    callback_owner_name: str | None = None
    call_successful: bool | None = None
    duration_ms: int | None = None
    disconnection_reason: str | None = None
    created_at: datetime | None = None
    has_callback: bool = False


class HistoryResponse(BaseModel):
    phone_number: str
    total: int
    interactions: list[InteractionOut]

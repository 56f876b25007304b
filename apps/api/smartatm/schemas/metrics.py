"""Schemas for usage and billing metrics."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class MonthlyMinutes(BaseModel):
    month: str
    duration_ms: int
    minutes: float


class MinutesResponse(BaseModel):
    range_start: datetime
    range_end: datetime
    is_filtered: bool
    total_duration_ms: int
    last_30_days_ms: int
    all_time_duration_ms: int
    total_minutes: float
    total_hours: float
    last_30_days_minutes: float
    all_time_minutes: float
    pca_count: int
    average_duration_ms: float
    cost_per_minute: float
    total_cost: float
    monthly: list[MonthlyMinutes]


class BillingMonth(BaseModel):
    month: str
    total_calls: int
    total_cost: float


class BillingResponse(BaseModel):
    cost_per_call: float
    months: list[BillingMonth]
    total_calls: int
    total_cost: float


class SummaryResponse(BaseModel):
    total_calls: int
    calls_with_pca: int
    successful_calls: int
    success_rate: float
    analysis_rate: float
    avg_agreed_amount: float | None = None


class DispositionsResponse(BaseModel):
    dispositions: list[str]

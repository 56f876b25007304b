"""Metrics and catalogue endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import metrics as metrics_schema
from ..services import metrics as metrics_service

router = APIRouter()


@router.get("/metrics/minutes", response_model=metrics_schema.MinutesResponse)
async def get_minutes(
    date_from: date | None = None,
    date_to: date | None = None,
    session: AsyncSession = Depends(get_session),
) -> metrics_schema.MinutesResponse:
    """Return talk time for the window, defaulting to the last six months."""

    return await metrics_service.get_minutes(session, date_from, date_to)


@router.get("/metrics/billing", response_model=metrics_schema.BillingResponse)
async def get_billing(session: AsyncSession = Depends(get_session)) -> metrics_schema.BillingResponse:
    return await metrics_service.get_billing(session)


@router.get("/metrics/summary", response_model=metrics_schema.SummaryResponse)
async def get_summary(session: AsyncSession = Depends(get_session)) -> metrics_schema.SummaryResponse:
    return await metrics_service.get_summary(session)


@router.get("/dispositions", response_model=metrics_schema.DispositionsResponse)
async def list_dispositions() -> metrics_schema.DispositionsResponse:
    return metrics_service.list_dispositions()

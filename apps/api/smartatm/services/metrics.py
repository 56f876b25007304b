"""Usage, billing and dashboard metrics."""
from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.dispositions import DISPOSITIONS
from ..repositories import metrics as metrics_repo
from ..repositories import pca as pca_repo
from ..repositories.filters import end_of_day, start_of_day
from ..schemas import metrics as schemas

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000


def months_before(value: datetime, months: int) -> datetime:
    """Same day and time ``months`` calendar months earlier, clamped to month end."""

    month_index = value.year * 12 + value.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def resolve_minutes_range(
    date_from: date | None,
    date_to: date | None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La fecha inicial no puede ser posterior a la fecha final",
        )

    end = end_of_day(date_to) if date_to is not None else (now or datetime.now(timezone.utc))
    if date_from is not None:
        start = start_of_day(date_from)
    else:
        start = months_before(end, settings.minutes_lookback_months)
    return start, end


def to_minutes(duration_ms: float) -> float:
    return round(duration_ms / MS_PER_MINUTE, 2)


async def get_minutes(
    session: AsyncSession,
    date_from: date | None = None,
    date_to: date | None = None,
) -> schemas.MinutesResponse:
    """Talk-time totals from PCA durations for a date window."""

    start, end = resolve_minutes_range(date_from, date_to)
    last_30_start = max(end - timedelta(days=30), start)

    total_ms = await metrics_repo.sum_duration_ms(session, start, end)
    last_30_ms = await metrics_repo.sum_duration_ms(session, last_30_start, end)
    all_time_ms = await metrics_repo.sum_duration_ms(session)
    monthly = await metrics_repo.monthly_duration_ms(session, start, end)
    pca_count = await pca_repo.count_between(session, start, end)

    total_minutes = total_ms / MS_PER_MINUTE
    return schemas.MinutesResponse(
        range_start=start,
        range_end=end,
        is_filtered=date_from is not None or date_to is not None,
        total_duration_ms=total_ms,
        last_30_days_ms=last_30_ms,
        all_time_duration_ms=all_time_ms,
        total_minutes=round(total_minutes, 2),
        total_hours=round(total_minutes / 60, 2),
        last_30_days_minutes=to_minutes(last_30_ms),
        all_time_minutes=to_minutes(all_time_ms),
        pca_count=pca_count,
        average_duration_ms=round(total_ms / pca_count, 2) if pca_count else 0.0,
        cost_per_minute=settings.minute_cost_usd,
        total_cost=round(total_minutes * settings.minute_cost_usd, 2),
        monthly=[
            schemas.MonthlyMinutes(
                month=row.month.strftime("%Y-%m"),
                duration_ms=int(row.value),
                minutes=to_minutes(row.value),
            )
            for row in monthly
        ],
    )


async def get_billing(session: AsyncSession) -> schemas.BillingResponse:
    """Calls per month priced at a flat rate per call."""

    rate = settings.call_cost_usd
    months = [
        schemas.BillingMonth(
            month=row.month.strftime("%Y-%m"),
            total_calls=int(row.value),
            total_cost=round(row.value * rate, 2),
        )
        for row in await metrics_repo.monthly_call_counts(session)
    ]
    total_calls = sum(month.total_calls for month in months)
    return schemas.BillingResponse(
        cost_per_call=rate,
        months=months,
        total_calls=total_calls,
        total_cost=round(total_calls * rate, 2),
    )


def _rate(part: int, whole: int) -> float:
    return round(part * 100 / whole, 1) if whole else 0.0


async def get_summary(session: AsyncSession) -> schemas.SummaryResponse:
    row = await metrics_repo.call_summary(session)
    return schemas.SummaryResponse(
        total_calls=row.total_calls,
        calls_with_pca=row.calls_with_pca,
        successful_calls=row.successful_calls,
        success_rate=_rate(row.successful_calls, row.total_calls),
        analysis_rate=_rate(row.calls_with_pca, row.total_calls),
        avg_agreed_amount=round(row.avg_agreed_amount, 2) if row.avg_agreed_amount is not None else None,
    )


def list_dispositions() -> schemas.DispositionsResponse:
    return schemas.DispositionsResponse(dispositions=list(DISPOSITIONS))

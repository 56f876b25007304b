"""Aggregate queries backing the metrics endpoints."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dispositions import SUCCESSFUL
from ..models.call import Call
from ..models.pca import PCA


@dataclass(slots=True)
class MonthTotal:
    month: datetime
    value: float


@dataclass(slots=True)
class CallSummaryRow:
    total_calls: int
    calls_with_pca: int
    successful_calls: int
    avg_agreed_amount: float | None


async def sum_duration_ms(
    session: AsyncSession,
    start: datetime | None = None,
    end: datetime | None = None,
) -> int:
    """Total PCA ``duration_ms``, optionally bounded by ``created_at``."""

    stmt = select(func.coalesce(func.sum(PCA.duration_ms), 0))
    if start is not None:
        stmt = stmt.where(PCA.created_at >= start)
    if end is not None:
        stmt = stmt.where(PCA.created_at <= end)
    result = await session.execute(stmt)
    return int(result.scalar_one() or 0)


async def monthly_duration_ms(session: AsyncSession, start: datetime, end: datetime) -> list[MonthTotal]:
    """Duration per calendar month, newest month first."""

    month = func.date_trunc("month", PCA.created_at).label("month")
    stmt = (
        select(month, func.coalesce(func.sum(PCA.duration_ms), 0))
        .where(PCA.created_at >= start, PCA.created_at <= end)
        .group_by(month)
        .order_by(month.desc())
    )
    result = await session.execute(stmt)
    return [MonthTotal(month=row_month, value=float(total or 0)) for row_month, total in result.all()]


async def monthly_call_counts(session: AsyncSession) -> list[MonthTotal]:
    """Number of calls per calendar month, newest month first."""

    month = func.date_trunc("month", Call.created_at).label("month")
    stmt = (
        select(month, func.count(Call.call_id))
        .where(Call.created_at.is_not(None))
        .group_by(month)
        .order_by(month.desc())
    )
    result = await session.execute(stmt)
    return [MonthTotal(month=row_month, value=float(count)) for row_month, count in result.all()]


async def call_summary(session: AsyncSession) -> CallSummaryRow:
    """Dashboard totals with the newest PCA disposition taking precedence."""

    latest_pca = (
        select(PCA.disposition)
        .where(PCA.call_id == Call.call_id)
        .order_by(PCA.created_at.desc())
        .limit(1)
        .correlate(Call)
        .scalar_subquery()
    )
    has_pca = select(PCA.id).where(PCA.call_id == Call.call_id).correlate(Call).exists()
    effective = func.coalesce(latest_pca, Call.disposition)

    stmt = select(
        func.count(Call.call_id),
        func.count(case((has_pca, 1))),
        func.count(case((effective == SUCCESSFUL, 1))),
        func.avg(case((Call.agreed_amount > 0, Call.agreed_amount))),
    )
    result = await session.execute(stmt)
    total, with_pca, successful, avg_amount = result.one()
    return CallSummaryRow(
        total_calls=int(total or 0),
        calls_with_pca=int(with_pca or 0),
        successful_calls=int(successful or 0),
        avg_agreed_amount=float(avg_amount) if avg_amount is not None else None,
    )

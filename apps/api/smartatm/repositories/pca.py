"""PCA (post-call analysis) repository helpers."""
from __future__ import annotations

from datetime import date
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pca import PCA
from .filters import date_range


async def list_by_call_ids(session: AsyncSession, call_ids: Sequence[str]) -> list[PCA]:
    """PCA rows for the given calls, newest first so the first row per call wins."""

    if not call_ids:
        return []
    stmt = (
        select(PCA)
        .where(PCA.call_id.in_(list(call_ids)))
        .order_by(PCA.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_for_call(session: AsyncSession, call_id: str) -> list[PCA]:
    return await list_by_call_ids(session, [call_id])


async def call_ids_with_disposition(
    session: AsyncSession,
    *,
    disposition: str,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int | None = None,
) -> list[str]:
    """Distinct call ids having at least one PCA row with ``disposition``."""

    stmt = select(PCA.call_id).where(func.lower(PCA.disposition) == disposition.lower())
    for clause in date_range(PCA.created_at, date_from, date_to):
        stmt = stmt.where(clause)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)

    seen: dict[str, None] = {}
    for call_id in result.scalars().all():
        if call_id:
            seen.setdefault(call_id, None)
    return list(seen)


async def numbers_with_dispositions(
    session: AsyncSession,
    *,
    dispositions: Sequence[str],
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[str]:
    """Destination numbers of PCA rows whose disposition is in ``dispositions``."""

    if not dispositions:
        return []
    stmt = select(PCA.to_number).where(
        func.lower(PCA.disposition).in_([disposition.lower() for disposition in dispositions])
    )
    for clause in date_range(PCA.created_at, date_from, date_to):
        stmt = stmt.where(clause)
    result = await session.execute(stmt)
    return [number for number in result.scalars().all() if number]


async def count_between(session: AsyncSession, start, end) -> int:
    stmt = select(func.count(PCA.id)).where(PCA.created_at >= start, PCA.created_at <= end)
    result = await session.execute(stmt)
    return int(result.scalar_one())

"""Callback repository helpers."""
from __future__ import annotations

from datetime import date
from typing import Any, Sequence
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.callback import Callback
from .filters import date_range, ilike_any

SEARCH_COLUMNS = (
    Callback.to_number,
    Callback.callback_owner_name,
    Callback.callback_time_text_raw,
)


class CallbackFiltersProtocol:
    """Protocol-like duck-type to avoid pydantic dependency at repo layer."""

    search: str | None
    disposition: str | None
    owner: str | None
    date_from: date | None
    date_to: date | None


async def get_by_id(session: AsyncSession, callback_id: str) -> Callback | None:
    return await session.get(Callback, callback_id)


async def list_by_to_numbers(session: AsyncSession, numbers: Sequence[str]) -> list[Callback]:
    """Callbacks scheduled for any of ``numbers``, newest first."""

    stmt = (
        select(Callback)
        .where(Callback.to_number.in_(list(numbers)))
        .order_by(Callback.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_by_call_ids(session: AsyncSession, call_ids: Sequence[str]) -> list[Callback]:
    if not call_ids:
        return []
    stmt = (
        select(Callback)
        .where(Callback.call_id.in_(list(call_ids)))
        .order_by(Callback.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_first_for_call(session: AsyncSession, call_id: str) -> Callback | None:
    stmt = (
        select(Callback)
        .where(Callback.call_id == call_id)
        .order_by(Callback.created_at.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def search(
    session: AsyncSession,
    *,
    filters: CallbackFiltersProtocol,
    offset: int,
    limit: int,
) -> tuple[list[Callback], int]:
    """Filtered callbacks page, newest first, with the total count."""

    stmt = select(Callback)
    if filters.search and filters.search.strip():
        stmt = stmt.where(ilike_any(SEARCH_COLUMNS, filters.search))
    if filters.disposition:
        stmt = stmt.where(Callback.disposition == filters.disposition)
    if filters.owner and filters.owner.strip():
        stmt = stmt.where(ilike_any((Callback.callback_owner_name,), filters.owner))
    for clause in date_range(Callback.created_at, filters.date_from, filters.date_to):
        stmt = stmt.where(clause)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    count = int((await session.execute(count_stmt)).scalar_one())

    stmt = stmt.order_by(Callback.created_at.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), count


async def linked_call_ids(session: AsyncSession) -> set[str]:
    """Every call id that already has a callback."""

    result = await session.execute(select(Callback.call_id).where(Callback.call_id.is_not(None)))
    return {call_id for call_id in result.scalars().all() if call_id}


async def all_destinations(session: AsyncSession) -> list[str]:
    result = await session.execute(select(Callback.to_number).where(Callback.to_number.is_not(None)))
    return [number for number in result.scalars().all() if number]


async def latest_dispositions(session: AsyncSession) -> list[tuple[str, str]]:
    """``(to_number, disposition)`` pairs, newest callback first."""

    stmt = (
        select(Callback.to_number, Callback.disposition)
        .where(Callback.to_number.is_not(None), Callback.disposition.is_not(None))
        .order_by(Callback.created_at.desc())
    )
    result = await session.execute(stmt)
    return [(number, disposition) for number, disposition in result.all()]


async def create(session: AsyncSession, fields: dict[str, Any]) -> Callback:
    values = dict(fields)
    values.setdefault("id", str(uuid4()))
    callback = Callback(**values)
    session.add(callback)
    await session.flush()
    return callback


async def delete(session: AsyncSession, callback: Callback) -> None:
    await session.delete(callback)
    await session.flush()


async def count_by_to_numbers(session: AsyncSession, numbers: Sequence[str]) -> dict[str, int]:
    """Number of callbacks per destination number."""

    if not numbers:
        return {}
    stmt = (
        select(Callback.to_number, func.count(Callback.id))
        .where(Callback.to_number.in_(list(numbers)))
        .group_by(Callback.to_number)
    )
    result = await session.execute(stmt)
    return {number: int(count) for number, count in result.all()}

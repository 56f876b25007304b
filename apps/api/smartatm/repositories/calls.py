"""Call repository helpers."""
from __future__ import annotations

from datetime import date
from typing import Sequence

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.call import Call
from .filters import date_range, ilike_any

CALL_SEARCH_COLUMNS = (
    Call.business_name,
    Call.owner_name,
    Call.owner_phone,
    Call.owner_email,
    Call.address_street,
    Call.call_id,
)

LEAD_SEARCH_COLUMNS = (
    Call.business_name,
    Call.owner_name,
    Call.to_number,
    Call.owner_email,
    Call.address_street,
    Call.address_city,
    Call.address_state,
)

PENDING_SEARCH_COLUMNS = (Call.to_number, Call.agent_name, Call.business_name)

SORTABLE_COLUMNS = {
    "call_id": Call.call_id,
    "created_at": Call.created_at,
    "business_name": Call.business_name,
    "owner_name": Call.owner_name,
    "owner_phone": Call.owner_phone,
    "to_number": Call.to_number,
    "agreed_amount": Call.agreed_amount,
    "monthly_amount": Call.monthly_amount,
    "company_key": Call.company_key,
}


class CallFiltersProtocol:
    """Protocol-like duck-type to avoid pydantic dependency at repo layer."""

    search: str | None
    date_from: date | None
    date_to: date | None
    call_ids: list[str]


async def get_by_id(session: AsyncSession, call_id: str) -> Call | None:
    """Return a call record by identifier."""

    return await session.get(Call, call_id)


async def list_by_to_numbers(session: AsyncSession, numbers: Sequence[str]) -> list[Call]:
    """Return every call placed to any of ``numbers``, newest call_id first."""

    stmt = select(Call).where(Call.to_number.in_(list(numbers))).order_by(Call.call_id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_by_to_number(session: AsyncSession, number: str) -> int:
    stmt = select(func.count(Call.call_id)).where(Call.to_number == number)
    result = await session.execute(stmt)
    return int(result.scalar_one())


def build_search_statement(
    filters: CallFiltersProtocol,
    *,
    narrow_to_ids: Sequence[str] | None = None,
    narrow_disposition: str | None = None,
) -> Select[tuple[Call]]:
    """Base statement for the calls screen with every server-side filter applied.

    ``narrow_to_ids``/``narrow_disposition`` restrict the candidate set for a
    disposition filter to calls that may end up with that disposition once
    PCA rows are joined in.
    """

    stmt = select(Call)

    if filters.search and filters.search.strip():
        stmt = stmt.where(ilike_any(CALL_SEARCH_COLUMNS, filters.search))
    if filters.call_ids:
        stmt = stmt.where(Call.call_id.in_(filters.call_ids))
    for clause in date_range(Call.created_at, filters.date_from, filters.date_to):
        stmt = stmt.where(clause)

    if narrow_to_ids is not None or narrow_disposition is not None:
        narrowing = []
        if narrow_to_ids:
            narrowing.append(Call.call_id.in_(list(narrow_to_ids)))
        if narrow_disposition:
            narrowing.append(func.lower(Call.disposition) == narrow_disposition.lower())
        stmt = stmt.where(or_(*narrowing))

    return stmt


async def search_calls(
    session: AsyncSession,
    stmt: Select[tuple[Call]],
    *,
    sort_by: str,
    descending: bool,
    offset: int | None = None,
    limit: int | None = None,
    with_count: bool = False,
) -> tuple[list[Call], int | None]:
    """Execute a calls statement with ordering and an optional window."""

    count: int | None = None
    if with_count:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        count = int((await session.execute(count_stmt)).scalar_one())

    column = SORTABLE_COLUMNS.get(sort_by, Call.call_id)
    ordering = column.desc() if descending else column.asc()
    stmt = stmt.order_by(ordering.nulls_last(), Call.call_id.desc())
    if offset is not None:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    result = await session.execute(stmt)
    return list(result.scalars().all()), count


async def list_for_lead_grouping(session: AsyncSession, search: str | None) -> list[Call]:
    """Calls with a destination number, newest call_id first, for lead aggregation."""

    stmt = select(Call).where(Call.to_number.is_not(None))
    if search and search.strip():
        stmt = stmt.where(ilike_any(LEAD_SEARCH_COLUMNS, search))
    stmt = stmt.order_by(Call.call_id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_pending_callbacks(
    session: AsyncSession,
    *,
    call_ids: Sequence[str],
    search: str | None,
    date_from: date | None,
    date_to: date | None,
    offset: int,
    limit: int,
) -> tuple[list[Call], int]:
    """Calls among ``call_ids`` matching the pending-callback screen filters."""

    stmt = select(Call).where(Call.call_id.in_(list(call_ids)))
    if search and search.strip():
        stmt = stmt.where(ilike_any(PENDING_SEARCH_COLUMNS, search))
    for clause in date_range(Call.created_at, date_from, date_to):
        stmt = stmt.where(clause)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    count = int((await session.execute(count_stmt)).scalar_one())

    stmt = stmt.order_by(Call.created_at.desc().nulls_last()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), count


async def list_destinations(
    session: AsyncSession,
    *,
    date_from: date | None,
    date_to: date | None,
    limit: int,
) -> list[str]:
    """Destination numbers of calls in a date range, one entry per call."""

    stmt = select(Call.to_number).where(Call.to_number.is_not(None))
    for clause in date_range(Call.created_at, date_from, date_to):
        stmt = stmt.where(clause)
    stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [row for row in result.scalars().all() if row]


async def last_call_dates(session: AsyncSession, numbers: Sequence[str]) -> dict[str, object]:
    """Newest ``created_at`` per destination number."""

    if not numbers:
        return {}
    stmt = (
        select(Call.to_number, func.max(Call.created_at))
        .where(Call.to_number.in_(list(numbers)))
        .group_by(Call.to_number)
    )
    result = await session.execute(stmt)
    return {number: created_at for number, created_at in result.all()}

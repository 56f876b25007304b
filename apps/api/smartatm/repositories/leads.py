"""Lead repository helpers."""
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.lead import Lead
from .filters import ilike_any, ilike_suffix

INSERT_CHUNK_SIZE = 1000

DIRECTORY_SEARCH_COLUMNS = (Lead.phone_number, Lead.owner_name, Lead.business_name)

DIRECTORY_SORT_COLUMNS = {
    "business_name": Lead.business_name,
    "owner_name": Lead.owner_name,
    "phone_number": Lead.phone_number,
}


async def get_by_phone(session: AsyncSession, phone_number: str) -> Lead | None:
    """Return the lead stored under exactly ``phone_number``."""

    stmt: Select[tuple[Lead]] = select(Lead).where(Lead.phone_number == phone_number).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def find_by_suffix(session: AsyncSession, digits: str) -> Lead | None:
    """Return the first lead whose phone ends with ``digits``."""

    stmt = select(Lead).where(ilike_suffix(Lead.phone_number, digits)).order_by(Lead.id.asc()).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_by_phones(session: AsyncSession, numbers: Sequence[str]) -> list[Lead]:
    if not numbers:
        return []
    stmt = select(Lead).where(Lead.phone_number.in_(list(numbers)))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def insert_ignoring_duplicates(session: AsyncSession, records: Sequence[dict[str, Any]]) -> list[str]:
    """Insert leads, silently skipping phones that already exist.

    Rows go out in chunks of ``INSERT_CHUNK_SIZE`` to stay under the driver's
    bind parameter limit. Returns the phone numbers that were actually inserted.
    """

    inserted: list[str] = []
    for start in range(0, len(records), INSERT_CHUNK_SIZE):
        chunk = list(records[start : start + INSERT_CHUNK_SIZE])
        stmt = (
            insert(Lead)
            .values(chunk)
            .on_conflict_do_nothing(index_elements=[Lead.phone_number])
            .returning(Lead.phone_number)
        )
        result = await session.execute(stmt)
        inserted.extend(result.scalars().all())
    return inserted


def directory_statement(search: str | None, phone_in: Sequence[str] | None = None) -> Select[tuple[Lead]]:
    stmt = select(Lead)
    if phone_in is not None:
        stmt = stmt.where(Lead.phone_number.in_(list(phone_in)))
    if search and search.strip():
        stmt = stmt.where(ilike_any(DIRECTORY_SEARCH_COLUMNS, search))
    return stmt


async def search_directory(
    session: AsyncSession,
    stmt: Select[tuple[Lead]],
    *,
    sort_by: str,
    descending: bool,
    offset: int | None = None,
    limit: int | None = None,
) -> tuple[list[Lead], int]:
    """Run a directory statement, returning the rows and the full count."""

    count_stmt = select(func.count()).select_from(stmt.subquery())
    count = int((await session.execute(count_stmt)).scalar_one())

    column = DIRECTORY_SORT_COLUMNS.get(sort_by, Lead.business_name)
    ordering = column.desc() if descending else column.asc()
    stmt = stmt.order_by(ordering.nulls_last(), Lead.id.asc())
    if offset is not None:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), count


async def list_for_export(session: AsyncSession, limit: int) -> list[Lead]:
    stmt = select(Lead).order_by(Lead.id.asc()).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())

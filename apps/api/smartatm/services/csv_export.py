"""Lead and call CSV export."""
from __future__ import annotations

import csv
import io
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..repositories import callbacks as callbacks_repo
from ..repositories import calls as calls_repo
from ..repositories import leads as leads_repo
from ..repositories import pca as pca_repo
from ..schemas import exports as schemas
from ..schemas.calls import CallFilters
from ..schemas.common import Page
from .calls import collect_calls
from .pagination import paginate
from .phones import normalize_phone, unique_normalized

logger = logging.getLogger(__name__)

LEADS_CSV_HEADER = ("phone number", "business_name", "customer_phone", "timezone")
CALLS_CSV_HEADER = (
    "call_id",
    "to_number",
    "business_name",
    "owner_name",
    "owner_phone",
    "disposition",
    "agreed_amount",
    "created_at",
)


def _cell(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def to_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Plain comma-joined header; every non-null data field is quoted."""

    buffer = io.StringIO()
    buffer.write(",".join(header) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NOTNULL, lineterminator="\n")
    writer.writerows([_cell(value) for value in row] for row in rows)
    return buffer.getvalue().removesuffix("\n")


def export_filename(kind: str) -> str:
    return f"{kind}_export_{datetime.now(timezone.utc).isoformat()}.csv"


def _lead_address(lead: Any) -> str:
    if lead.address:
        return lead.address
    parts = [lead.address_street, lead.address_city, lead.address_state, lead.address_zip]
    return ", ".join(part for part in parts if part)


def select_export_rows(
    leads: Sequence[Any],
    call_counts: Counter,
    excluded_numbers: set[str],
    callback_numbers: set[str],
    filters: schemas.ExportFilters,
) -> list[schemas.ExportPreviewRow]:
    """Apply the export filters to leads, keyed by normalized phone."""

    rows: list[schemas.ExportPreviewRow] = []
    for lead in leads:
        digits = normalize_phone(lead.phone_number)
        if filters.omit_callbacks and digits in callback_numbers:
            continue
        if digits in excluded_numbers:
            continue
        calls_count = call_counts.get(digits, 0)
        if filters.min_calls > 0 and calls_count < filters.min_calls:
            continue
        rows.append(
            schemas.ExportPreviewRow(
                phone_number=lead.phone_number,
                business_name=lead.business_name,
                address=_lead_address(lead),
                customer_phone=lead.phone_number,
                timezone=lead.timezone,
                calls_count=calls_count,
            )
        )
    return rows


async def collect_export_rows(filters: schemas.ExportFilters, session: AsyncSession) -> list[schemas.ExportPreviewRow]:
    limit = settings.export_row_limit
    leads = await leads_repo.list_for_export(session, limit)

    callback_numbers: set[str] = set()
    if filters.omit_callbacks:
        callback_numbers = unique_normalized(await callbacks_repo.all_destinations(session))

    excluded_numbers: set[str] = set()
    if filters.omit_dispositions:
        excluded_numbers = unique_normalized(
            await pca_repo.numbers_with_dispositions(
                session,
                dispositions=filters.omit_dispositions,
                date_from=filters.date_from,
                date_to=filters.date_to,
            )
        )

    destinations = await calls_repo.list_destinations(
        session,
        date_from=filters.date_from,
        date_to=filters.date_to,
        limit=limit,
    )
    call_counts = Counter(digits for digits in map(normalize_phone, destinations) if digits)

    rows = select_export_rows(leads, call_counts, excluded_numbers, callback_numbers, filters)
    logger.info(
        "Export selection: %d of %d leads (%d calls, %d distinct numbers)",
        len(rows),
        len(leads),
        len(destinations),
        len(call_counts),
    )
    return rows


async def preview_leads(filters: schemas.ExportFilters, session: AsyncSession) -> Page[schemas.ExportPreviewRow]:
    rows = await collect_export_rows(filters, session)
    return Page[schemas.ExportPreviewRow].from_result(paginate(rows, filters.page, filters.limit))


async def leads_csv(filters: schemas.ExportFilters, session: AsyncSession) -> str:
    rows = await collect_export_rows(filters, session)
    return to_csv(
        LEADS_CSV_HEADER,
        ((row.phone_number, row.business_name, row.customer_phone, row.timezone) for row in rows),
    )


async def calls_csv(filters: CallFilters, session: AsyncSession) -> str:
    rows = await collect_calls(filters, session, limit=settings.export_row_limit)
    return to_csv(
        CALLS_CSV_HEADER,
        (
            (
                row.call_id,
                row.to_number,
                row.business_name,
                row.owner_name,
                row.owner_phone,
                row.disposition,
                row.agreed_amount,
                row.created_at,
            )
            for row in rows
        ),
    )

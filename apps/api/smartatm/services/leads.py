"""Lead aggregation, the lead directory and lead lookup for a call number."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dispositions import resolve_disposition
from ..repositories import callbacks as callbacks_repo
from ..repositories import calls as calls_repo
from ..repositories import leads as leads_repo
from ..repositories import pca as pca_repo
from ..schemas import leads as schemas
from ..schemas.common import Page
from .pagination import PageWindow, empty_page, page_from_count, paginate, sort_nulls_last
from .phones import lead_lookup_patterns, normalize_phone

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = (
    "business_name",
    "owner_name",
    "owner_email",
    "address_street",
    "address_city",
    "address_state",
)


def first_pca_by_call(pca_rows: Iterable[Any]) -> dict[str, Any]:
    """Keep the first row per call; rows must be ordered newest first."""

    by_call: dict[str, Any] = {}
    for row in pca_rows:
        by_call.setdefault(row.call_id, row)
    return by_call


def newest_callback_dispositions(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Map normalized number to the disposition of its newest callback."""

    by_number: dict[str, str] = {}
    for number, disposition in pairs:
        digits = normalize_phone(number)
        if digits and disposition:
            by_number.setdefault(digits, disposition)
    return by_number


def aggregate_leads(
    calls: Sequence[Any],
    pca_by_call: dict[str, Any],
    callback_dispositions: dict[str, str],
) -> list[schemas.LeadSummary]:
    """Group calls by normalized destination number.

    ``calls`` must be ordered newest first. Profile fields take the newest
    non-empty value; the disposition follows PCA > call > callback.
    """

    groups: dict[str, list[Any]] = {}
    for call in calls:
        digits = normalize_phone(call.to_number)
        if digits:
            groups.setdefault(digits, []).append(call)

    leads: list[schemas.LeadSummary] = []
    for digits, group in groups.items():
        newest = group[0]
        profile: dict[str, Any] = {}
        for call in group:
            for field in _PROFILE_FIELDS:
                if not profile.get(field):
                    profile[field] = getattr(call, field, None)

        pca = pca_by_call.get(newest.call_id)
        disposition = resolve_disposition(
            pca.disposition if pca is not None else None,
            newest.disposition,
            callback_dispositions.get(digits),
        )
        agreed_amount = next(
            (call.agreed_amount for call in group if call.agreed_amount is not None),
            None,
        )

        leads.append(
            schemas.LeadSummary(
                phone_number=digits,
                to_number=newest.to_number,
                total_calls=len(group),
                last_call_id=newest.call_id,
                last_call_date=getattr(newest, "created_at", None),
                last_disposition=disposition,
                agreed_amount=agreed_amount,
                **profile,
            )
        )
    return leads


def filter_leads(leads: list[schemas.LeadSummary], filters: schemas.LeadFilters) -> list[schemas.LeadSummary]:
    rows = leads
    if filters.disposition:
        wanted = filters.disposition.lower()
        rows = [lead for lead in rows if (lead.last_disposition or "").lower() == wanted]
    if filters.min_calls:
        rows = [lead for lead in rows if lead.total_calls >= filters.min_calls]
    if filters.has_agreed_amount == "yes":
        rows = [lead for lead in rows if lead.agreed_amount]
    elif filters.has_agreed_amount == "no":
        rows = [lead for lead in rows if not lead.agreed_amount]
    return rows


def _lead_sort_key(sort_by: str):
    if sort_by in ("business_name", "owner_name"):
        return lambda lead: (getattr(lead, sort_by) or "").lower() or None
    return lambda lead: getattr(lead, sort_by)


async def list_leads(filters: schemas.LeadFilters, session: AsyncSession) -> Page[schemas.LeadSummary]:
    """Aggregated leads screen; always enriched before paginating."""

    calls = await calls_repo.list_for_lead_grouping(session, filters.search)
    pca_rows = await pca_repo.list_by_call_ids(session, [call.call_id for call in calls])
    callback_dispositions = newest_callback_dispositions(await callbacks_repo.latest_dispositions(session))

    leads = aggregate_leads(calls, first_pca_by_call(pca_rows), callback_dispositions)
    leads = filter_leads(leads, filters)
    leads = sort_nulls_last(leads, _lead_sort_key(filters.sort_by), filters.sort_order)

    result = paginate(leads, filters.page, filters.limit)
    logger.info("Leads page %d: %d of %d grouped numbers", filters.page, len(result.data), result.total)
    return Page[schemas.LeadSummary].from_result(result)


def _number_variants(leads: Iterable[Any]) -> list[str]:
    variants: dict[str, None] = {}
    for lead in leads:
        if lead.phone_number:
            variants.setdefault(lead.phone_number, None)
            digits = normalize_phone(lead.phone_number)
            if digits:
                variants.setdefault(digits, None)
    return list(variants)


async def _directory_entries(session: AsyncSession, leads: Sequence[Any]) -> list[schemas.DirectoryEntry]:
    numbers = _number_variants(leads)
    last_dates: dict[str, Any] = {}
    for number, created_at in (await calls_repo.last_call_dates(session, numbers)).items():
        digits = normalize_phone(number)
        if created_at is not None and (digits not in last_dates or created_at > last_dates[digits]):
            last_dates[digits] = created_at

    callback_counts: dict[str, int] = {}
    for number, count in (await callbacks_repo.count_by_to_numbers(session, numbers)).items():
        digits = normalize_phone(number)
        callback_counts[digits] = callback_counts.get(digits, 0) + count

    entries = []
    for lead in leads:
        digits = normalize_phone(lead.phone_number)
        entry = schemas.DirectoryEntry.model_validate(lead)
        entry.last_call_date = last_dates.get(digits)
        entry.callbacks_count = callback_counts.get(digits, 0)
        entries.append(entry)
    return entries


async def list_directory(filters: schemas.DirectoryFilters, session: AsyncSession) -> Page[schemas.DirectoryEntry]:
    """Rows of the leads table with their last call date and callback count."""

    window = PageWindow(filters.page, filters.limit)

    phone_in: list[str] | None = None
    if filters.only_with_callbacks:
        destinations = await callbacks_repo.all_destinations(session)
        if not destinations:
            return Page[schemas.DirectoryEntry].from_result(empty_page(filters.page, filters.limit))
        phone_in = list(dict.fromkeys(destinations + [normalize_phone(number) for number in destinations]))

    stmt = leads_repo.directory_statement(filters.search, phone_in)
    descending = filters.sort_order == "desc"

    if filters.sort_by == "last_call_date":
        rows, _ = await leads_repo.search_directory(session, stmt, sort_by="business_name", descending=False)
        entries = await _directory_entries(session, rows)
        entries = sort_nulls_last(entries, lambda entry: entry.last_call_date, filters.sort_order)
        result = paginate(entries, filters.page, filters.limit)
    else:
        rows, count = await leads_repo.search_directory(
            session,
            stmt,
            sort_by=filters.sort_by,
            descending=descending,
            offset=window.offset,
            limit=window.limit,
        )
        entries = await _directory_entries(session, rows)
        result = page_from_count(entries, count, filters.page, filters.limit)

    return Page[schemas.DirectoryEntry].from_result(result)


async def find_lead_for_number(session: AsyncSession, raw: str | None) -> Any | None:
    """Find the lead behind a call number, exact match first, then by suffix."""

    if not raw:
        return None

    lead = await leads_repo.get_by_phone(session, raw)
    if lead is not None:
        return lead

    digits = normalize_phone(raw)
    if digits and digits != raw:
        lead = await leads_repo.get_by_phone(session, digits)
        if lead is not None:
            return lead

    for kind, pattern in lead_lookup_patterns(raw):
        if kind == "exact":
            lead = await leads_repo.get_by_phone(session, pattern)
        else:
            lead = await leads_repo.find_by_suffix(session, pattern)
        if lead is not None:
            logger.debug("Lead for %s matched by %s pattern %s", raw, kind, pattern)
            return lead
    return None


async def leads_by_normalized_phone(session: AsyncSession, numbers: Iterable[str | None]) -> dict[str, Any]:
    """Map normalized phone to lead for the given raw numbers."""

    variants: dict[str, None] = {}
    for number in numbers:
        if number:
            variants.setdefault(number, None)
            digits = normalize_phone(number)
            if digits:
                variants.setdefault(digits, None)
    if not variants:
        return {}

    by_phone: dict[str, Any] = {}
    for lead in await leads_repo.list_by_phones(session, list(variants)):
        digits = normalize_phone(lead.phone_number)
        if digits:
            by_phone.setdefault(digits, lead)
    return by_phone

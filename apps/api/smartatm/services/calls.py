"""Calls screen: filtered listing, call detail and pending callbacks."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.dispositions import POSSIBLY_INTERESTED, resolve_disposition
from ..repositories import callbacks as callbacks_repo
from ..repositories import calls as calls_repo
from ..repositories import pca as pca_repo
from ..schemas import calls as schemas
from ..schemas.callbacks import CallbackOut
from ..schemas.common import Page
from .leads import find_lead_for_number, first_pca_by_call, leads_by_normalized_phone
from .pagination import PageWindow, empty_page, page_from_count, paginate, sort_rows
from .phones import normalize_phone

logger = logging.getLogger(__name__)

SORT_COLUMNS = frozenset(calls_repo.SORTABLE_COLUMNS) | {"disposition"}

_LEAD_FILL_FIELDS = {
    "business_name": "business_name",
    "owner_name": "owner_name",
    "owner_email": "email",
    "address_street": "address_street",
    "address_city": "address_city",
    "address_state": "address_state",
    "address_zip": "address_zip",
    "location_type": "location_type",
}


def requires_enrichment(filters: schemas.CallFilters) -> bool:
    """True when a filter or the sort depends on data joined from other tables."""

    return bool(filters.disposition) or filters.has_pca is not None or filters.sort_by == "disposition"


def enrich_calls(
    calls: Sequence[Any],
    pca_by_call: dict[str, Any],
    callback_by_call: dict[str, Any],
    lead_by_phone: dict[str, Any],
) -> list[schemas.CallRow]:
    """Attach the newest PCA, callback owner and lead data to each call."""

    rows: list[schemas.CallRow] = []
    for call in calls:
        row = schemas.CallRow.model_validate(call)
        pca = pca_by_call.get(call.call_id)
        if pca is not None:
            row.has_pca = True
            row.disposition = resolve_disposition(pca.disposition, call.disposition)
            row.duration_ms = pca.duration_ms
            row.disconnection_reason = pca.disconnection_reason
            if pca.call_successful is not None:
                row.call_successful = pca.call_successful

        callback = callback_by_call.get(call.call_id)
        if callback is not None:
            row.has_callbacks = True
            row.owner_name = callback.callback_owner_name or row.owner_name
            row.owner_phone = callback.callback_owner_phone or row.owner_phone

        lead = lead_by_phone.get(normalize_phone(call.to_number))
        if lead is not None:
            row.lead_phone = lead.phone_number
            if not row.business_name:
                row.business_name = lead.business_name
        rows.append(row)
    return rows


def filter_enriched(rows: list[schemas.CallRow], filters: schemas.CallFilters) -> list[schemas.CallRow]:
    if filters.disposition:
        wanted = filters.disposition.lower()
        rows = [row for row in rows if (row.disposition or "").lower() == wanted]
    if filters.has_pca is not None:
        rows = [row for row in rows if row.has_pca == filters.has_pca]
    return rows


async def _enrich(session: AsyncSession, calls: Sequence[Any]) -> list[schemas.CallRow]:
    if not calls:
        return []
    call_ids = [call.call_id for call in calls]
    pca_rows = await pca_repo.list_by_call_ids(session, call_ids)
    callbacks = await callbacks_repo.list_by_call_ids(session, call_ids)
    callback_by_call: dict[str, Any] = {}
    for callback in callbacks:
        callback_by_call.setdefault(callback.call_id, callback)
    lead_by_phone = await leads_by_normalized_phone(session, (call.to_number for call in calls))
    return enrich_calls(calls, first_pca_by_call(pca_rows), callback_by_call, lead_by_phone)


async def _search_statement(filters: schemas.CallFilters, session: AsyncSession):
    if not filters.disposition:
        return calls_repo.build_search_statement(filters)

    pca_ids = await pca_repo.call_ids_with_disposition(
        session,
        disposition=filters.disposition,
        limit=settings.pca_prequery_limit,
    )
    if len(pca_ids) > settings.in_clause_threshold:
        logger.info("Skipping disposition pre-filter: %d PCA matches", len(pca_ids))
        return calls_repo.build_search_statement(filters)
    return calls_repo.build_search_statement(
        filters,
        narrow_to_ids=pca_ids,
        narrow_disposition=filters.disposition,
    )


def _validate_sort(filters: schemas.CallFilters) -> None:
    if filters.sort_by not in SORT_COLUMNS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported sort column: {filters.sort_by}",
        )


async def collect_calls(
    filters: schemas.CallFilters,
    session: AsyncSession,
    limit: int | None = None,
) -> list[schemas.CallRow]:
    """Every call matching ``filters``, enriched, filtered and sorted."""

    _validate_sort(filters)
    stmt = await _search_statement(filters, session)
    descending = filters.sort_order == "desc"
    server_sort = filters.sort_by if filters.sort_by in calls_repo.SORTABLE_COLUMNS else "call_id"

    calls, _ = await calls_repo.search_calls(
        session,
        stmt,
        sort_by=server_sort,
        descending=descending,
        limit=limit,
    )
    rows = filter_enriched(await _enrich(session, calls), filters)
    if filters.sort_by == "disposition":
        rows = sort_rows(rows, lambda row: (row.disposition or "").lower(), filters.sort_order)
    return rows


async def list_calls(filters: schemas.CallFilters, session: AsyncSession) -> Page[schemas.CallRow]:
    """Calls screen listing.

    Filters that only touch ``calls`` run on the server with a window and an
    exact count. Anything depending on joined data goes through
    ``collect_calls`` and is paginated afterwards.
    """

    window = PageWindow(filters.page, filters.limit)

    if requires_enrichment(filters):
        rows = await collect_calls(filters, session)
        result = paginate(rows, filters.page, filters.limit)
    else:
        _validate_sort(filters)
        stmt = calls_repo.build_search_statement(filters)
        calls, count = await calls_repo.search_calls(
            session,
            stmt,
            sort_by=filters.sort_by,
            descending=filters.sort_order == "desc",
            offset=window.offset,
            limit=window.limit,
            with_count=True,
        )
        result = page_from_count(await _enrich(session, calls), count, filters.page, filters.limit)

    logger.info(
        "Calls page %d: %d rows of %d (enriched=%s)",
        filters.page,
        len(result.data),
        result.total,
        requires_enrichment(filters),
    )
    return Page[schemas.CallRow].from_result(result)


async def get_call_detail(call_id: str, session: AsyncSession) -> schemas.CallDetailResponse:
    """Call with its PCA rows, callback and lead-enriched fields."""

    call = await calls_repo.get_by_id(session, call_id)
    if call is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Call not found")

    pca_rows = await pca_repo.list_for_call(session, call_id)
    callback = await callbacks_repo.get_first_for_call(session, call_id)
    lead = await find_lead_for_number(session, call.to_number)

    detail = schemas.CallDetail.model_validate(call)
    if pca_rows:
        newest = pca_rows[0]
        detail.has_pca = True
        detail.disposition = resolve_disposition(newest.disposition, call.disposition)
        detail.duration_ms = newest.duration_ms
        detail.disconnection_reason = newest.disconnection_reason
    if callback is not None:
        detail.has_callbacks = True
        detail.disposition = resolve_disposition(detail.disposition, callback.disposition)

    if lead is not None:
        for call_field, lead_field in _LEAD_FILL_FIELDS.items():
            if not getattr(detail, call_field):
                setattr(detail, call_field, getattr(lead, lead_field, None))
        detail.lead_phone = lead.phone_number
        detail.lead_business_name = lead.business_name
        detail.lead_owner_name = lead.owner_name

    return schemas.CallDetailResponse(
        call=detail,
        pca=[schemas.PCAOut.model_validate(row) for row in pca_rows],
        is_callback=callback is not None,
        callback=CallbackOut.model_validate(callback) if callback is not None else None,
    )


async def list_pending_callbacks(
    filters: schemas.PendingCallbackFilters,
    session: AsyncSession,
) -> Page[schemas.PendingCallbackRow]:
    """Possibly-interested calls nobody has scheduled a callback for yet."""

    window = PageWindow(filters.page, filters.limit)

    interested = await pca_repo.call_ids_with_disposition(
        session,
        disposition=POSSIBLY_INTERESTED,
        limit=settings.pca_prequery_limit,
    )
    linked = await callbacks_repo.linked_call_ids(session)
    pending = [call_id for call_id in interested if call_id not in linked]
    if not pending:
        return Page[schemas.PendingCallbackRow].from_result(empty_page(filters.page, filters.limit))

    calls, count = await calls_repo.list_pending_callbacks(
        session,
        call_ids=pending,
        search=filters.search,
        date_from=filters.date_from,
        date_to=filters.date_to,
        offset=window.offset,
        limit=window.limit,
    )
    lead_by_phone = await leads_by_normalized_phone(session, (call.to_number for call in calls))

    rows = []
    for call in calls:
        lead = lead_by_phone.get(normalize_phone(call.to_number))
        rows.append(
            schemas.PendingCallbackRow(
                call_id=call.call_id,
                to_number=call.to_number,
                agent_name=call.agent_name,
                business_name=call.business_name or (lead.business_name if lead is not None else None),
                disposition=POSSIBLY_INTERESTED,
                created_at=call.created_at,
            )
        )
    return Page[schemas.PendingCallbackRow].from_result(page_from_count(rows, count, filters.page, filters.limit))

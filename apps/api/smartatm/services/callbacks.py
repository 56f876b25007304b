"""Callback listing and management."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dispositions import CALLBACK_COMPLETED
from ..models.callback import Callback
from ..repositories import callbacks as callbacks_repo
from ..schemas import callbacks as schemas
from ..schemas.common import Page
from .leads import leads_by_normalized_phone
from .pagination import PageWindow, page_from_count
from .phones import normalize_phone

logger = logging.getLogger(__name__)


async def list_callbacks(filters: schemas.CallbackFilters, session: AsyncSession) -> Page[schemas.CallbackRow]:
    """Newest callbacks first, with the business name of the matching lead."""

    window = PageWindow(filters.page, filters.limit)
    callbacks, count = await callbacks_repo.search(
        session,
        filters=filters,
        offset=window.offset,
        limit=window.limit,
    )
    lead_by_phone = await leads_by_normalized_phone(session, (callback.to_number for callback in callbacks))

    rows = []
    for callback in callbacks:
        row = schemas.CallbackRow.model_validate(callback)
        lead = lead_by_phone.get(normalize_phone(callback.to_number))
        if lead is not None:
            row.business_name = lead.business_name
        rows.append(row)

    return Page[schemas.CallbackRow].from_result(page_from_count(rows, count, filters.page, filters.limit))


async def _get_or_404(session: AsyncSession, callback_id: str) -> Callback:
    callback = await callbacks_repo.get_by_id(session, callback_id)
    if callback is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Callback not found")
    return callback


async def create_callback(payload: schemas.CallbackCreate, session: AsyncSession) -> schemas.CallbackOut:
    async with session.begin():
        callback = await callbacks_repo.create(session, payload.model_dump(exclude_none=True))
    logger.info("Created callback %s for %s", callback.id, callback.to_number)
    return schemas.CallbackOut.model_validate(callback)


async def update_callback(
    callback_id: str,
    payload: schemas.CallbackUpdate,
    session: AsyncSession,
) -> schemas.CallbackOut:
    """Apply only the fields present in the request body."""

    async with session.begin():
        callback = await _get_or_404(session, callback_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(callback, field, value)
        await session.flush()
    return schemas.CallbackOut.model_validate(callback)


async def complete_callback(callback_id: str, session: AsyncSession) -> schemas.CallbackOut:
    async with session.begin():
        callback = await _get_or_404(session, callback_id)
        callback.disposition = CALLBACK_COMPLETED
        await session.flush()
    logger.info("Callback %s marked as completed", callback_id)
    return schemas.CallbackOut.model_validate(callback)


async def delete_callback(callback_id: str, session: AsyncSession) -> None:
    async with session.begin():
        callback = await _get_or_404(session, callback_id)
        await callbacks_repo.delete(session, callback)
    logger.info("Deleted callback %s", callback_id)

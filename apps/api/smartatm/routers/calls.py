"""Calls screen endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import calls as calls_schema
from ..schemas.common import Page
from ..services import calls as calls_service
from ..services import history as history_service

router = APIRouter()


@router.get("", response_model=Page[calls_schema.CallRow])
async def list_calls(
    filters: Annotated[calls_schema.CallFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[calls_schema.CallRow]:
    """Return a page of calls with PCA, callback and lead data attached."""

    return await calls_service.list_calls(filters, session)


@router.get("/pending-callbacks", response_model=Page[calls_schema.PendingCallbackRow])
async def list_pending_callbacks(
    filters: Annotated[calls_schema.PendingCallbackFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[calls_schema.PendingCallbackRow]:
    return await calls_service.list_pending_callbacks(filters, session)


@router.get("/{call_id}", response_model=calls_schema.CallDetailResponse)
async def get_call(
    call_id: str,
    session: AsyncSession = Depends(get_session),
) -> calls_schema.CallDetailResponse:
    """Return a call with its analysis rows and callback."""

    return await calls_service.get_call_detail(call_id, session)


@router.get("/{call_id}/history-info", response_model=calls_schema.HistoryInfo)
async def get_history_info(
    call_id: str,
    session: AsyncSession = Depends(get_session),
) -> calls_schema.HistoryInfo:
    info = await history_service.get_history_info(session, call_id)
    return calls_schema.HistoryInfo(**info)

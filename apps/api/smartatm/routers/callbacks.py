"""Callback endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import callbacks as callbacks_schema
from ..schemas.common import Page
from ..services import callbacks as callbacks_service

router = APIRouter()


@router.get("", response_model=Page[callbacks_schema.CallbackRow])
async def list_callbacks(
    filters: Annotated[callbacks_schema.CallbackFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[callbacks_schema.CallbackRow]:
    return await callbacks_service.list_callbacks(filters, session)


@router.post("", response_model=callbacks_schema.CallbackOut, status_code=status.HTTP_201_CREATED)
async def create_callback(
    payload: callbacks_schema.CallbackCreate,
    session: AsyncSession = Depends(get_session),
) -> callbacks_schema.CallbackOut:
    return await callbacks_service.create_callback(payload, session)


@router.patch("/{callback_id}", response_model=callbacks_schema.CallbackOut)
async def update_callback(
    callback_id: str,
    payload: callbacks_schema.CallbackUpdate,
    session: AsyncSession = Depends(get_session),
) -> callbacks_schema.CallbackOut:
    return await callbacks_service.update_callback(callback_id, payload, session)


@router.post("/{callback_id}/complete", response_model=callbacks_schema.CallbackOut)
async def complete_callback(
    callback_id: str,
    session: AsyncSession = Depends(get_session),
) -> callbacks_schema.CallbackOut:
    """Mark a callback as done."""

    return await callbacks_service.complete_callback(callback_id, session)


@router.delete("/{callback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_callback(
    callback_id: str,
    session: AsyncSession = Depends(get_session),
) -> Response:
    await callbacks_service.delete_callback(callback_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

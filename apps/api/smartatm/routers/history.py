"""Per-phone history endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import history as history_schema
from ..services import history as history_service

router = APIRouter()


@router.get("/{phone_number}", response_model=history_schema.HistoryResponse)
async def get_history(
    phone_number: str,
    session: AsyncSession = Depends(get_session),
) -> history_schema.HistoryResponse:
    """Return calls and callbacks for a number as one timeline, newest first."""

    interactions = await history_service.get_call_history(session, phone_number)
    return history_schema.HistoryResponse(
        phone_number=phone_number,
        total=len(interactions),
        interactions=[history_schema.InteractionOut.model_validate(item) for item in interactions],
    )

"""Lead endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import leads as leads_schema
from ..schemas.common import Page
from ..services import leads as leads_service

router = APIRouter()


@router.get("", response_model=Page[leads_schema.LeadSummary])
async def list_leads(
    filters: Annotated[leads_schema.LeadFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[leads_schema.LeadSummary]:
    """Return calls grouped by destination number."""

    return await leads_service.list_leads(filters, session)


@router.get("/directory", response_model=Page[leads_schema.DirectoryEntry])
async def list_directory(
    filters: Annotated[leads_schema.DirectoryFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[leads_schema.DirectoryEntry]:
    """Return stored leads with last call date and callback count."""

    return await leads_service.list_directory(filters, session)

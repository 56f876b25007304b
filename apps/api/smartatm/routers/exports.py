"""CSV export endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas import exports as exports_schema
from ..schemas.calls import CallFilters
from ..schemas.common import Page
from ..services import csv_export

router = APIRouter()

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _csv_response(content: str, kind: str) -> Response:
    filename = csv_export.export_filename(kind)
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/leads/preview", response_model=Page[exports_schema.ExportPreviewRow])
async def preview_leads(
    filters: Annotated[exports_schema.ExportFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Page[exports_schema.ExportPreviewRow]:
    return await csv_export.preview_leads(filters, session)


@router.get("/leads.csv")
async def export_leads(
    filters: Annotated[exports_schema.ExportFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Response:
    return _csv_response(await csv_export.leads_csv(filters, session), "leads")


@router.get("/calls.csv")
async def export_calls(
    filters: Annotated[CallFilters, Query()],
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Every call matching the calls-screen filters, without pagination."""

    return _csv_response(await csv_export.calls_csv(filters, session), "calls")

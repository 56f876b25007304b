"""CSV import endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..schemas.imports import ImportReport
from ..services import csv_import

router = APIRouter()


@router.post("/leads", response_model=ImportReport)
async def import_leads(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
) -> ImportReport:
    """Insert new leads from an uploaded CSV; existing phones are skipped."""

    content = await file.read()
    return await csv_import.import_leads(content, session)

"""Schemas for CSV lead import."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ImportReport(BaseModel):
    total_rows: int
    unique_rows: int
    inserted: int
    duplicates_in_file: int
    duplicates_in_db: int
    invalid_rows: int
    status: Literal["success", "info"]
    message: str

"""CSV lead import.

The upload is decoded, split with the standard ``csv`` module using a sniffed
delimiter, mapped onto lead columns through a table of header aliases and
inserted with conflict-ignore on ``leads.phone_number``.
"""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import leads as leads_repo
from ..schemas.imports import ImportReport
from .phones import normalize_phone

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "Archivo vacío"

HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "phone_number": (
        "phone_number",
        "phone",
        "customer_phone",
        "customer phone",
        "customer_phone_number",
        "telefono",
        "celular",
    ),
    "owner_name": ("owner_name", "owner", "owner name", "propietario"),
    "business_name": ("business_name", "business", "business name", "company", "negocio"),
    "address": ("address", "street", "direccion", "address_street"),
    "location_type": ("location_type", "location type", "type", "loc_type"),
    "timezone": ("timezone", "tz"),
    "email": ("email", "owner_email", "email_address"),
}


@dataclass(slots=True)
class ImportPlan:
    """Parsed upload ready to insert."""

    records: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    invalid_rows: int = 0
    duplicates_in_file: int = 0


def sniff_delimiter(first_line: str) -> str:
    delimiter = ","
    if first_line.count(";") > first_line.count(","):
        delimiter = ";"
    if first_line.count("\t") > first_line.count(delimiter):
        delimiter = "\t"
    return delimiter


def decode_upload(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error al procesar el archivo: debe estar codificado en UTF-8",
        ) from exc


def split_rows(text: str) -> list[list[str]]:
    """Split non-blank lines into trimmed fields."""

    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=EMPTY_FILE_MESSAGE)

    reader = csv.reader(lines, delimiter=sniff_delimiter(lines[0]))
    return [[value.strip() for value in row] for row in reader]


def map_headers(headers: list[str]) -> dict[str, int]:
    """Column index per lead field; the first alias present in the header wins."""

    lowered = [header.lstrip("\ufeff").strip().lower() for header in headers]
    mapping: dict[str, int] = {}
    for target, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                mapping[target] = lowered.index(alias)
                break
    return mapping


def build_plan(rows: list[list[str]]) -> ImportPlan:
    headers, data = rows[0], rows[1:]
    mapping = map_headers(headers)
    plan = ImportPlan(total_rows=len(data))

    seen: set[str] = set()
    for row in data:
        record: dict[str, Any] = {}
        for target in HEADER_ALIASES:
            index = mapping.get(target)
            value = row[index] if index is not None and index < len(row) else ""
            record[target] = normalize_phone(value) if target == "phone_number" else value

        phone = record["phone_number"]
        if not phone:
            plan.invalid_rows += 1
            continue
        if phone in seen:
            plan.duplicates_in_file += 1
            continue
        seen.add(phone)
        plan.records.append({key: value or None for key, value in record.items()} | {"phone_number": phone})
    return plan


def build_report(plan: ImportPlan, inserted: int) -> ImportReport:
    unique_rows = len(plan.records)
    duplicates_in_db = unique_rows - inserted
    if inserted == 0:
        return ImportReport(
            total_rows=plan.total_rows,
            unique_rows=unique_rows,
            inserted=0,
            duplicates_in_file=plan.duplicates_in_file,
            duplicates_in_db=duplicates_in_db,
            invalid_rows=plan.invalid_rows,
            status="info",
            message=f"No hay registros nuevos. Se procesaron {plan.total_rows} filas y todas eran duplicadas.",
        )

    omitted = duplicates_in_db + plan.duplicates_in_file
    return ImportReport(
        total_rows=plan.total_rows,
        unique_rows=unique_rows,
        inserted=inserted,
        duplicates_in_file=plan.duplicates_in_file,
        duplicates_in_db=duplicates_in_db,
        invalid_rows=plan.invalid_rows,
        status="success",
        message=(
            f"Importación exitosa: {inserted} registros nuevos agregados. "
            f"Se omitieron {omitted} duplicados ({plan.duplicates_in_file} en archivo, "
            f"{duplicates_in_db} en base de datos)."
        ),
    )


async def import_leads(content: bytes, session: AsyncSession) -> ImportReport:
    plan = build_plan(split_rows(decode_upload(content)))

    try:
        async with session.begin():
            inserted = await leads_repo.insert_ignoring_duplicates(session, plan.records)
    except SQLAlchemyError as exc:
        logger.exception("Lead import failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Error al importar: {exc.__class__.__name__}",
        ) from exc

    report = build_report(plan, len(inserted))
    logger.info(
        "Imported leads: %d rows, %d inserted, %d duplicates in file, %d already stored, %d invalid",
        report.total_rows,
        report.inserted,
        report.duplicates_in_file,
        report.duplicates_in_db,
        report.invalid_rows,
    )
    return report

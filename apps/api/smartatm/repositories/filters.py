"""Shared filter builders for list queries."""
from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Iterable

from sqlalchemy import ColumnElement, or_

_LIKE_SPECIALS = re.compile(r"([\\%_])")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""

    return _LIKE_SPECIALS.sub(r"\\\1", term)


def ilike_any(columns: Iterable[Any], term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match of ``term`` against any of ``columns``."""

    pattern = f"%{escape_like(term.strip())}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def ilike_suffix(column: Any, digits: str) -> ColumnElement[bool]:
    return column.ilike(f"%{escape_like(digits)}", escape="\\")


def start_of_day(value: date | datetime) -> datetime:
    """Lower bound of a date filter."""

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def end_of_day(value: date | datetime) -> datetime:
    """Upper bound of a date filter; a bare date covers the whole day."""

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time(23, 59, 59, 999000), tzinfo=timezone.utc)


def date_range(column: Any, date_from: date | datetime | None, date_to: date | datetime | None) -> list[ColumnElement[bool]]:
    clauses: list[ColumnElement[bool]] = []
    if date_from is not None:
        clauses.append(column >= start_of_day(date_from))
    if date_to is not None:
        clauses.append(column <= end_of_day(date_to))
    return clauses

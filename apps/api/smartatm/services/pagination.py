"""Pagination contract shared by every list endpoint.

A list query either pushes all of its filters to the database, in which case
the server count is authoritative (``page_from_count``), or it *requires
enrichment*: some filter or sort depends on data joined client-side from
another table. In that case the caller fetches the whole filtered candidate
set, enriches and filters it, sorts it and only then calls ``paginate``, so
totals reflect the enriched array rather than the server's row count.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, Literal, Sequence, TypeVar

from fastapi import HTTPException, status

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]


@dataclass(slots=True, frozen=True)
class PageWindow:
    """Offset/limit pair derived from a 1-based page number."""

    page: int
    limit: int

    def __post_init__(self) -> None:
        if self.page < 1 or self.limit < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="page and limit must be positive",
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end(self) -> int:
        return self.offset + self.limit


@dataclass(slots=True)
class PageResult(Generic[T]):
    """A page of rows plus totals."""

    data: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1


def paginate(items: Sequence[T], page: int, limit: int) -> PageResult[T]:
    """Slice an enriched, filtered and sorted list; totals come from the list itself."""

    window = PageWindow(page, limit)
    return PageResult(
        data=list(items[window.offset:window.end]),
        total=len(items),
        page=page,
        limit=limit,
    )


def page_from_count(items: Sequence[T], count: int | None, page: int, limit: int) -> PageResult[T]:
    """Wrap a page the server already sliced, trusting its reported count."""

    total = count if count is not None else len(items)
    return PageResult(data=list(items), total=total, page=page, limit=limit)


def empty_page(page: int, limit: int) -> PageResult:
    return PageResult(data=[], total=0, page=page, limit=limit)


@dataclass(slots=True, frozen=True)
class SortState:
    """Column header sort state of a list screen."""

    column: str
    order: SortOrder = "desc"

    def toggle(self, column: str) -> "SortState":
        """Clicking the active column flips the order; a new column starts descending."""

        if column == self.column:
            return SortState(column=column, order="asc" if self.order == "desc" else "desc")
        return SortState(column=column, order="desc")

    @property
    def descending(self) -> bool:
        return self.order == "desc"


def sort_rows(
    rows: list[T],
    key: Callable[[T], object],
    order: SortOrder,
) -> list[T]:
    """Stable in-memory sort used after enrichment."""

    return sorted(rows, key=key, reverse=order == "desc")


def sort_nulls_last(
    rows: list[T],
    key: Callable[[T], object],
    order: SortOrder,
) -> list[T]:
    """Like ``sort_rows`` but rows whose key is ``None`` always come last."""

    present = [row for row in rows if key(row) is not None]
    missing = [row for row in rows if key(row) is None]
    return sort_rows(present, key, order) + missing

"""Shared response envelopes."""
from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]


class Page(BaseModel, Generic[T]):
    data: list[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def from_result(cls, result: Any) -> "Page[T]":
        """Build the envelope from a ``PageResult``."""

        return cls(
            data=list(result.data),
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
            has_next_page=result.has_next_page,
            has_previous_page=result.has_previous_page,
        )


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=25, ge=1, le=500)

import pytest
from fastapi import HTTPException

from smartatm.services.pagination import (
    PageWindow,
    SortState,
    page_from_count,
    paginate,
    sort_nulls_last,
)


def test_paginate_reports_totals_of_the_filtered_list() -> None:
    rows = list(range(13))

    result = paginate(rows, page=3, limit=5)

    assert result.data == [10, 11, 12]
    assert result.total == 13
    assert result.total_pages == 3
    assert not result.has_next_page
    assert result.has_previous_page


def test_paginate_past_the_end_is_empty() -> None:
    result = paginate(list(range(4)), page=2, limit=5)

    assert result.data == []
    assert result.total == 4
    assert result.total_pages == 1


def test_page_from_count_trusts_server_count() -> None:
    result = page_from_count(["a", "b"], 42, page=1, limit=2)

    assert result.total == 42
    assert result.total_pages == 21
    assert result.has_next_page


def test_page_window_offsets() -> None:
    window = PageWindow(page=4, limit=25)

    assert window.offset == 75
    assert window.end == 100


def test_page_window_rejects_non_positive_values() -> None:
    with pytest.raises(HTTPException) as exc:
        PageWindow(page=0, limit=10)

    assert exc.value.status_code == 400


def test_sort_toggle_flips_same_column_and_resets_new_column() -> None:
    state = SortState(column="business_name", order="asc")

    flipped = state.toggle("business_name")
    assert flipped == SortState(column="business_name", order="desc")
    assert flipped.toggle("business_name").order == "asc"

    switched = flipped.toggle("created_at")
    assert switched == SortState(column="created_at", order="desc")
    assert switched.descending


def test_sort_nulls_last_in_both_directions() -> None:
    rows = [{"v": 2}, {"v": None}, {"v": 5}, {"v": 1}]

    ascending = sort_nulls_last(rows, lambda row: row["v"], "asc")
    descending = sort_nulls_last(rows, lambda row: row["v"], "desc")

    assert [row["v"] for row in ascending] == [1, 2, 5, None]
    assert [row["v"] for row in descending] == [5, 2, 1, None]

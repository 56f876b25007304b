"""Tests for minutes, billing and summary metrics."""
from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from smartatm.repositories import metrics as metrics_repo
from smartatm.repositories import pca as pca_repo
from smartatm.services import metrics as metrics_service


def test_months_before_clamps_to_month_end() -> None:
    value = datetime(2024, 8, 31, 12, 0, tzinfo=timezone.utc)

    assert metrics_service.months_before(value, 6) == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)
    assert metrics_service.months_before(value, 8) == datetime(2023, 12, 31, 12, 0, tzinfo=timezone.utc)


def test_minutes_range_defaults_to_lookback() -> None:
    now = datetime(2024, 7, 15, 10, 0, tzinfo=timezone.utc)

    start, end = metrics_service.resolve_minutes_range(None, None, now=now)

    assert end == now
    assert start == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def test_minutes_range_with_only_end_date() -> None:
    start, end = metrics_service.resolve_minutes_range(None, date(2024, 7, 15))

    assert end == datetime(2024, 7, 15, 23, 59, 59, 999000, tzinfo=timezone.utc)
    assert start == datetime(2024, 1, 15, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_minutes_range_rejects_inverted_dates() -> None:
    with pytest.raises(HTTPException) as exc:
        metrics_service.resolve_minutes_range(date(2024, 5, 2), date(2024, 5, 1))

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_get_minutes_aggregates(monkeypatch):
    sum_mock = AsyncMock(side_effect=[600_000, 120_000, 6_000_000])
    monkeypatch.setattr(metrics_repo, "sum_duration_ms", sum_mock)
    monkeypatch.setattr(
        metrics_repo,
        "monthly_duration_ms",
        AsyncMock(
            return_value=[
                metrics_repo.MonthTotal(month=datetime(2024, 5, 1, tzinfo=timezone.utc), value=480_000),
                metrics_repo.MonthTotal(month=datetime(2024, 4, 1, tzinfo=timezone.utc), value=120_000),
            ]
        ),
    )
    monkeypatch.setattr(pca_repo, "count_between", AsyncMock(return_value=4))

    result = await metrics_service.get_minutes(AsyncMock(), date(2024, 4, 1), date(2024, 5, 31))

    assert result.is_filtered
    assert result.total_duration_ms == 600_000
    assert result.total_minutes == 10
    assert result.last_30_days_minutes == 2
    assert result.all_time_minutes == 100
    assert result.average_duration_ms == 150_000
    assert result.total_cost == 2.1
    assert [month.month for month in result.monthly] == ["2024-05", "2024-04"]
    last_30_start = sum_mock.await_args_list[1].args[1]
    assert last_30_start == datetime(2024, 5, 1, 23, 59, 59, 999000, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_get_minutes_clamps_last_30_days_to_range_start(monkeypatch):
    sum_mock = AsyncMock(return_value=0)
    monkeypatch.setattr(metrics_repo, "sum_duration_ms", sum_mock)
    monkeypatch.setattr(metrics_repo, "monthly_duration_ms", AsyncMock(return_value=[]))
    monkeypatch.setattr(pca_repo, "count_between", AsyncMock(return_value=0))

    result = await metrics_service.get_minutes(AsyncMock(), date(2024, 5, 20), date(2024, 5, 31))

    assert sum_mock.await_args_list[1].args[1] == datetime(2024, 5, 20, tzinfo=timezone.utc)
    assert result.average_duration_ms == 0


@pytest.mark.asyncio
async def test_billing_prices_calls_per_month(monkeypatch):
    monkeypatch.setattr(
        metrics_repo,
        "monthly_call_counts",
        AsyncMock(
            return_value=[
                metrics_repo.MonthTotal(month=datetime(2024, 6, 1, tzinfo=timezone.utc), value=100),
                metrics_repo.MonthTotal(month=datetime(2024, 5, 1, tzinfo=timezone.utc), value=10),
            ]
        ),
    )

    result = await metrics_service.get_billing(AsyncMock())

    assert [(month.month, month.total_calls, month.total_cost) for month in result.months] == [
        ("2024-06", 100, 21.0),
        ("2024-05", 10, 2.1),
    ]
    assert result.total_calls == 110
    assert result.total_cost == 23.1


@pytest.mark.asyncio
async def test_summary_rates(monkeypatch):
    monkeypatch.setattr(
        metrics_repo,
        "call_summary",
        AsyncMock(
            return_value=metrics_repo.CallSummaryRow(
                total_calls=3,
                calls_with_pca=2,
                successful_calls=1,
                avg_agreed_amount=123.456,
            )
        ),
    )

    result = await metrics_service.get_summary(AsyncMock())

    assert result.success_rate == 33.3
    assert result.analysis_rate == 66.7
    assert result.avg_agreed_amount == 123.46


def test_dispositions_catalogue() -> None:
    assert "possibly_interested" in metrics_service.list_dispositions().dispositions

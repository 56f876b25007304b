"""Tests for lead and call CSV export."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from smartatm.repositories import callbacks as callbacks_repo
from smartatm.repositories import calls as calls_repo
from smartatm.repositories import leads as leads_repo
from smartatm.repositories import pca as pca_repo
from smartatm.schemas import exports as schemas
from smartatm.schemas.calls import CallFilters, CallRow
from smartatm.services import csv_export


def make_lead(phone: str, **overrides) -> SimpleNamespace:
    values = dict(
        phone_number=phone,
        business_name=None,
        address=None,
        address_street=None,
        address_city=None,
        address_state=None,
        address_zip=None,
        timezone=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_to_csv_quotes_fields_and_leaves_nulls_empty() -> None:
    content = csv_export.to_csv(
        ("phone number", "business_name", "timezone"),
        [("5551234567", 'Joe\'s "Best" Deli', None), ("5550001111", "Night Owl", "America/Denver")],
    )

    assert content.split("\n") == [
        "phone number,business_name,timezone",
        '"5551234567","Joe\'s ""Best"" Deli",',
        '"5550001111","Night Owl","America/Denver"',
    ]


def test_to_csv_without_rows_is_header_only() -> None:
    assert csv_export.to_csv(("a", "b"), []) == "a,b"


def test_to_csv_formats_datetimes_as_iso() -> None:
    created = datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc)

    content = csv_export.to_csv(("created_at",), [(created,)])

    assert content.endswith('"2024-01-05T09:30:00+00:00"')


def test_export_filename_has_prefix_and_extension() -> None:
    name = csv_export.export_filename("leads")

    assert name.startswith("leads_export_")
    assert name.endswith(".csv")


def test_select_export_rows_applies_every_filter() -> None:
    leads = [
        make_lead("(555) 123-4567", business_name="Corner Market", timezone="America/Chicago"),
        make_lead("5550001111", business_name="Night Owl"),
        make_lead("5552223333", business_name="Has Callback"),
        make_lead("5554445555", business_name="Single Call", address_street="1 Main", address_city="Austin"),
    ]
    counts = Counter({"5551234567": 3, "5550001111": 5, "5552223333": 4, "5554445555": 1})
    filters = schemas.ExportFilters(min_calls=2, omit_callbacks=True, omit_dispositions=["not_interested"])

    rows = csv_export.select_export_rows(
        leads,
        counts,
        excluded_numbers={"5550001111"},
        callback_numbers={"5552223333"},
        filters=filters,
    )

    assert [row.phone_number for row in rows] == ["(555) 123-4567"]
    assert rows[0].customer_phone == "(555) 123-4567"
    assert rows[0].calls_count == 3


def test_select_export_rows_joins_address_parts() -> None:
    rows = csv_export.select_export_rows(
        [make_lead("5554445555", address_street="1 Main", address_city="Austin")],
        Counter(),
        excluded_numbers=set(),
        callback_numbers=set(),
        filters=schemas.ExportFilters(),
    )

    assert rows[0].address == "1 Main, Austin"
    assert rows[0].calls_count == 0


@pytest.mark.asyncio
async def test_leads_csv_uses_export_columns(monkeypatch):
    monkeypatch.setattr(
        leads_repo,
        "list_for_export",
        AsyncMock(return_value=[make_lead("5551234567", business_name="Corner Market")]),
    )
    monkeypatch.setattr(calls_repo, "list_destinations", AsyncMock(return_value=["555-123-4567", "5551234567"]))
    all_destinations = AsyncMock(return_value=[])
    numbers_with_dispositions = AsyncMock(return_value=[])
    monkeypatch.setattr(callbacks_repo, "all_destinations", all_destinations)
    monkeypatch.setattr(pca_repo, "numbers_with_dispositions", numbers_with_dispositions)

    content = await csv_export.leads_csv(schemas.ExportFilters(min_calls=2), AsyncMock())

    assert content == 'phone number,business_name,customer_phone,timezone\n"5551234567","Corner Market","5551234567",'
    all_destinations.assert_not_awaited()
    numbers_with_dispositions.assert_not_awaited()


@pytest.mark.asyncio
async def test_preview_paginates_after_filtering(monkeypatch):
    leads = [make_lead(f"555000{index:04d}") for index in range(13)]
    monkeypatch.setattr(leads_repo, "list_for_export", AsyncMock(return_value=leads))
    monkeypatch.setattr(calls_repo, "list_destinations", AsyncMock(return_value=[]))

    page = await csv_export.preview_leads(schemas.ExportFilters(page=3, limit=5), AsyncMock())

    assert len(page.data) == 3
    assert page.total == 13
    assert page.total_pages == 3


@pytest.mark.asyncio
async def test_calls_csv_serializes_collected_rows(monkeypatch):
    row = CallRow(call_id="call_1", to_number="5551234567", disposition="no_answer", agreed_amount=150.0)
    collect = AsyncMock(return_value=[row])
    monkeypatch.setattr(csv_export, "collect_calls", collect)

    content = await csv_export.calls_csv(CallFilters(disposition="no_answer"), AsyncMock())

    lines = content.split("\n")
    assert lines[0] == "call_id,to_number,business_name,owner_name,owner_phone,disposition,agreed_amount,created_at"
    assert lines[1] == '"call_1","5551234567",,,,"no_answer","150.0",'

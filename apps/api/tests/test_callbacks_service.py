"""Tests for callback listing and management."""
from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from smartatm.repositories import callbacks as callbacks_repo
from smartatm.repositories import leads as leads_repo
from smartatm.schemas import callbacks as schemas
from smartatm.services import callbacks as callbacks_service


class DummySession:
    """Minimal session stub supporting async transaction context."""

    def __init__(self) -> None:
        self.begin_called = False
        self.flushed = 0

    async def flush(self) -> None:
        self.flushed += 1

    def begin(self):  # noqa: D401 - mimic SQLAlchemy's async begin
        session = self

        class _Tx:
            async def __aenter__(self_inner):
                session.begin_called = True
                return session

            async def __aexit__(self_inner, exc_type, exc, tb):
                return False

        return _Tx()


def make_callback(callback_id: str, **overrides) -> SimpleNamespace:
    values = dict(
        id=callback_id,
        call_id=None,
        disposition=None,
        callback_owner_name=None,
        callback_time=None,
        to_number="5551234567",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.asyncio
async def test_list_callbacks_attaches_business_name(monkeypatch):
    search = AsyncMock(return_value=([make_callback("cb-1", to_number="(555) 123-4567"), make_callback("cb-2", to_number=None)], 7))
    monkeypatch.setattr(callbacks_repo, "search", search)
    monkeypatch.setattr(
        leads_repo,
        "list_by_phones",
        AsyncMock(return_value=[SimpleNamespace(phone_number="5551234567", business_name="Corner Market")]),
    )

    filters = schemas.CallbackFilters(search="555", owner="dana", page=2, limit=5)
    page = await callbacks_service.list_callbacks(filters, AsyncMock())

    assert search.await_args.kwargs["offset"] == 5
    assert search.await_args.kwargs["filters"] is filters
    assert page.total == 7
    assert page.data[0].business_name == "Corner Market"
    assert page.data[1].business_name is None


@pytest.mark.asyncio
async def test_create_callback_passes_only_given_fields(monkeypatch):
    create = AsyncMock(return_value=make_callback("generated", to_number="5550001111"))
    monkeypatch.setattr(callbacks_repo, "create", create)
    session = DummySession()

    result = await callbacks_service.create_callback(
        schemas.CallbackCreate(to_number="5550001111", callback_owner_name="Sam"),
        session,
    )

    assert session.begin_called
    assert create.await_args.args[1] == {"to_number": "5550001111", "callback_owner_name": "Sam"}
    assert result.id == "generated"


@pytest.mark.asyncio
async def test_complete_callback_sets_completed(monkeypatch):
    callback = make_callback("cb-1", disposition="possibly_interested")
    monkeypatch.setattr(callbacks_repo, "get_by_id", AsyncMock(return_value=callback))

    result = await callbacks_service.complete_callback("cb-1", DummySession())

    assert callback.disposition == "Completed"
    assert result.disposition == "Completed"


@pytest.mark.asyncio
async def test_update_callback_applies_set_fields_only(monkeypatch):
    callback = make_callback("cb-1", disposition="possibly_interested", callback_owner_name="Dana")
    monkeypatch.setattr(callbacks_repo, "get_by_id", AsyncMock(return_value=callback))

    result = await callbacks_service.update_callback(
        "cb-1",
        schemas.CallbackUpdate(callback_owner_name="Dana Ruiz"),
        DummySession(),
    )

    assert result.callback_owner_name == "Dana Ruiz"
    assert result.disposition == "possibly_interested"


@pytest.mark.asyncio
async def test_unknown_callback_is_404(monkeypatch):
    monkeypatch.setattr(callbacks_repo, "get_by_id", AsyncMock(return_value=None))
    delete = AsyncMock()
    monkeypatch.setattr(callbacks_repo, "delete", delete)

    with pytest.raises(HTTPException) as exc:
        await callbacks_service.delete_callback("missing", DummySession())

    assert exc.value.status_code == 404
    delete.assert_not_awaited()

"""Websocket live search tests."""
from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from smartatm.core.config import settings
from smartatm.main import app
from smartatm.routers import search as search_router
from smartatm.schemas.calls import CallRow
from smartatm.schemas.common import Page
from smartatm.services import calls as calls_service
from smartatm.services.pagination import SortState, paginate


@asynccontextmanager
async def fake_session():
    yield AsyncMock()


def test_search_state_sort_toggles() -> None:
    state = search_router.SearchState()

    state.apply({"type": "sort", "column": "business_name"})
    assert (state.filters.sort_by, state.filters.sort_order) == ("business_name", "desc")

    state.apply({"type": "sort", "column": "business_name"})
    assert state.filters.sort_order == "asc"

    state.apply({"type": "page", "page": 3})
    assert state.filters.page == 3

    state.apply({"type": "query", "query": "  market "})
    assert state.filters.search == "market"
    assert state.filters.page == 1


def test_websocket_pushes_results(monkeypatch) -> None:
    monkeypatch.setattr(settings, "search_debounce_ms", 0)
    monkeypatch.setattr(search_router, "open_session", fake_session)
    list_calls = AsyncMock(return_value=Page[CallRow].from_result(paginate([CallRow(call_id="call_9")], 1, 25)))
    monkeypatch.setattr(calls_service, "list_calls", list_calls)

    with TestClient(app) as client:
        with client.websocket_connect("/api/search/calls") as websocket:
            websocket.send_json({"type": "query", "query": "market"})
            message = websocket.receive_json()

    assert message["type"] == "results"
    assert message["data"][0]["call_id"] == "call_9"
    assert list_calls.await_args.args[0].search == "market"


def test_websocket_reports_failures(monkeypatch) -> None:
    monkeypatch.setattr(settings, "search_debounce_ms", 0)
    monkeypatch.setattr(search_router, "open_session", fake_session)
    monkeypatch.setattr(calls_service, "list_calls", AsyncMock(side_effect=HTTPException(status_code=400)))

    with TestClient(app) as client:
        with client.websocket_connect("/api/search/calls") as websocket:
            websocket.send_json({"type": "bogus"})
            unknown = websocket.receive_json()
            websocket.send_json({"type": "query", "query": "x"})
            failure = websocket.receive_json()

    assert unknown["type"] == "error"
    assert failure == {"type": "error", "message": "Error al cargar llamadas"}


def test_filters_message_moves_sort_state() -> None:
    state = search_router.SearchState()

    state.apply({"type": "filters", "filters": {"sort_by": "business_name", "sort_order": "asc"}})
    state.apply({"type": "sort", "column": "business_name"})

    assert (state.filters.sort_by, state.filters.sort_order) == ("business_name", "desc")
    assert state.sort == SortState(column="business_name", order="desc")


@pytest.mark.asyncio
async def test_send_message_reports_closed_socket() -> None:
    websocket = SimpleNamespace(send_json=AsyncMock(side_effect=RuntimeError("socket closed")))
    open_socket = SimpleNamespace(send_json=AsyncMock())

    assert await search_router.send_message(websocket, {"type": "results"}) is False
    assert await search_router.send_message(open_socket, {"type": "results"}) is True
    open_socket.send_json.assert_awaited_once_with({"type": "results"})


def test_websocket_survives_malformed_frame(monkeypatch) -> None:
    monkeypatch.setattr(settings, "search_debounce_ms", 0)
    monkeypatch.setattr(search_router, "open_session", fake_session)
    list_calls = AsyncMock(return_value=Page[CallRow].from_result(paginate([CallRow(call_id="call_3")], 1, 25)))
    monkeypatch.setattr(calls_service, "list_calls", list_calls)

    with TestClient(app) as client:
        with client.websocket_connect("/api/search/calls") as websocket:
            websocket.send_text("{not json")
            invalid = websocket.receive_json()
            websocket.send_json({"type": "query", "query": "market"})
            results = websocket.receive_json()

    assert invalid == {"type": "error", "message": search_router.INVALID_MESSAGE}
    assert results["type"] == "results"
    assert results["data"][0]["call_id"] == "call_3"

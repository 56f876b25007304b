"""Live, debounced call search over a websocket."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..core.config import settings
from ..db.session import open_session
from ..schemas.calls import CallFilters
from ..services import calls as calls_service
from ..services.debounce import Debouncer
from ..services.pagination import SortState

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_ERROR_MESSAGE = "Error al cargar llamadas"
INVALID_MESSAGE = "Mensaje inválido"


class SearchState:
    """Filters and sort of one connected search screen."""

    def __init__(self) -> None:
        self.filters = CallFilters()
        self.sort = SortState(column=self.filters.sort_by, order=self.filters.sort_order)

    def apply(self, message: dict[str, Any]) -> None:
        """Fold a client message into the state; anything but paging resets to page 1."""

        kind = message.get("type")
        update: dict[str, Any] = {"page": 1}
        if kind == "query":
            update["search"] = (message.get("query") or "").strip() or None
        elif kind == "sort":
            toggled = self.sort.toggle(str(message.get("column") or self.sort.column))
            update["sort_by"] = toggled.column
            update["sort_order"] = toggled.order
        elif kind == "filters":
            update.update(message.get("filters") or {})
        elif kind == "page":
            update["page"] = message.get("page")
        else:
            raise ValueError(f"Unknown message type: {kind}")

        self.filters = CallFilters.model_validate(self.filters.model_dump() | update)
        self.sort = SortState(column=self.filters.sort_by, order=self.filters.sort_order)


async def send_message(websocket: WebSocket, payload: dict[str, Any]) -> bool:
    """Push ``payload``; False when the client is already gone."""

    try:
        await websocket.send_json(payload)
    except (WebSocketDisconnect, RuntimeError):
        logger.debug("Search client disconnected before %s message", payload.get("type"))
        return False
    return True


@router.websocket("/calls")
async def search_calls(websocket: WebSocket) -> None:
    await websocket.accept()
    state = SearchState()

    async def run_search() -> None:
        filters = state.filters
        try:
            async with open_session() as session:
                page = await calls_service.list_calls(filters, session)
        except (SQLAlchemyError, HTTPException):
            logger.exception("Live call search failed")
            await send_message(websocket, {"type": "error", "message": SEARCH_ERROR_MESSAGE})
            return
        await send_message(websocket, {"type": "results", **page.model_dump(mode="json")})

    debouncer = Debouncer(settings.search_debounce_ms / 1000, run_search)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": INVALID_MESSAGE})
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": INVALID_MESSAGE})
                continue
            try:
                state.apply(message)
            except (ValueError, ValidationError) as exc:
                await websocket.send_json({"type": "error", "message": str(exc)})
                continue
            debouncer.trigger()
    except WebSocketDisconnect:
        pass
    finally:
        debouncer.cancel()

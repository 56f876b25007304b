"""Per-phone call history: calls and callbacks merged into one timeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Literal, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dispositions import resolve_disposition
from ..repositories import calls as calls_repo
from ..repositories import callbacks as callbacks_repo
from ..repositories import pca as pca_repo
from .phones import phone_candidates

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class Interaction:
    """One entry of the merged history."""

    type: Literal["call", "callback"]
    date: Any
    display_date: Any
    call_id: str | None = None
    id: str | None = None
    disposition: str | None = None
    business_name: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    agreed_amount: float | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    callback_time: Any = None
    callback_owner_name: str | None = None
    call_successful: bool | None = None
    duration_ms: int | None = None
    disconnection_reason: str | None = None
    created_at: Any = None
    has_callback: bool = False


@dataclass(slots=True)
class _PcaInfo:
    disposition: str | None
    call_successful: bool | None
    duration_ms: int | None
    disconnection_reason: str | None


def merge_call_history(
    calls: Sequence[Any],
    callbacks: Sequence[Any],
    pca_rows: Iterable[Any],
) -> list[Interaction]:
    """Merge calls and callbacks for one number.

    ``pca_rows`` must be ordered newest first; the first row seen for a call
    wins. A call referenced by a callback is emitted once, as the callback.
    """

    pca_by_call: dict[str, _PcaInfo] = {}
    for row in pca_rows:
        if row.call_id in pca_by_call:
            continue
        pca_by_call[row.call_id] = _PcaInfo(
            disposition=getattr(row, "disposition", None),
            call_successful=getattr(row, "call_successful", None),
            duration_ms=getattr(row, "duration_ms", None),
            disconnection_reason=getattr(row, "disconnection_reason", None),
        )

    calls_by_id = {call.call_id: call for call in calls}
    callback_by_call: dict[str, Any] = {}
    for callback in callbacks:
        if callback.call_id and callback.call_id in calls_by_id:
            callback_by_call.setdefault(callback.call_id, callback)

    interactions: list[Interaction] = []
    for call in calls:
        if call.call_id in callback_by_call:
            continue
        interactions.append(_call_interaction(call, pca_by_call.get(call.call_id)))

    for callback in callbacks:
        call = calls_by_id.get(callback.call_id) if callback.call_id else None
        pca = pca_by_call.get(callback.call_id) if call is not None else None
        interactions.append(_callback_interaction(callback, call, pca))

    interactions.sort(key=lambda item: _date_sort_key(item.date), reverse=True)
    return interactions


def _call_interaction(call: Any, pca: _PcaInfo | None) -> Interaction:
    created_at = getattr(call, "created_at", None)
    marker = created_at or call.call_id
    return Interaction(
        type="call",
        date=marker,
        display_date=marker,
        call_id=call.call_id,
        disposition=resolve_disposition(pca.disposition if pca else None, call.disposition),
        business_name=call.business_name,
        owner_name=call.owner_name,
        owner_phone=getattr(call, "owner_phone", None),
        agreed_amount=call.agreed_amount,
        address_street=getattr(call, "address_street", None),
        address_city=getattr(call, "address_city", None),
        address_state=getattr(call, "address_state", None),
        call_successful=_prefer_pca(pca, "call_successful", getattr(call, "call_successful", None)),
        duration_ms=_prefer_pca(pca, "duration_ms", None),
        disconnection_reason=_prefer_pca(pca, "disconnection_reason", None),
        created_at=created_at,
    )


def _callback_interaction(callback: Any, call: Any | None, pca: _PcaInfo | None) -> Interaction:
    created_at = getattr(callback, "created_at", None)
    callback_time = getattr(callback, "callback_time", None)
    marker = callback_time or created_at or callback.id
    owner_name = getattr(callback, "callback_owner_name", None)

    interaction = Interaction(
        type="callback",
        date=marker,
        display_date=marker,
        call_id=callback.call_id,
        id=callback.id,
        callback_time=callback_time,
        callback_owner_name=owner_name,
        created_at=created_at,
        has_callback=call is not None,
    )

    if call is None:
        interaction.business_name = getattr(callback, "business_name", None)
        interaction.owner_name = owner_name
        interaction.owner_phone = getattr(callback, "callback_owner_phone", None)
        interaction.disposition = callback.disposition
        return interaction

    interaction.business_name = call.business_name
    interaction.owner_name = owner_name or call.owner_name
    interaction.owner_phone = getattr(call, "owner_phone", None)
    interaction.agreed_amount = call.agreed_amount
    interaction.address_street = getattr(call, "address_street", None)
    interaction.address_city = getattr(call, "address_city", None)
    interaction.address_state = getattr(call, "address_state", None)
    interaction.disposition = resolve_disposition(
        pca.disposition if pca else None,
        call.disposition,
        callback.disposition,
    )
    interaction.call_successful = _prefer_pca(pca, "call_successful", getattr(call, "call_successful", None))
    interaction.duration_ms = _prefer_pca(pca, "duration_ms", None)
    interaction.disconnection_reason = _prefer_pca(pca, "disconnection_reason", None)
    return interaction


def _prefer_pca(pca: _PcaInfo | None, field: str, fallback: Any) -> Any:
    if pca is None:
        return fallback
    value = getattr(pca, field)
    return fallback if value is None else value


def _date_sort_key(value: Any) -> tuple[int, datetime, str]:
    """Real dates sort above opaque markers; markers compare as strings."""

    parsed = _parse_date(value)
    if parsed is None:
        return (0, _OLDEST, "" if value is None else str(value))
    return (1, parsed, "")


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


async def get_call_history(session: AsyncSession, phone_number: str) -> list[Interaction]:
    """Fetch calls, callbacks and PCA rows for a number and merge them."""

    numbers = phone_candidates(phone_number)
    if not numbers:
        return []

    calls = await calls_repo.list_by_to_numbers(session, numbers)
    call_ids = [call.call_id for call in calls]

    callbacks = await callbacks_repo.list_by_to_numbers(session, numbers)
    if call_ids:
        linked = await callbacks_repo.list_by_call_ids(session, call_ids)
        known = {callback.id for callback in callbacks}
        callbacks = list(callbacks) + [callback for callback in linked if callback.id not in known]

    pca_rows = await pca_repo.list_by_call_ids(session, call_ids) if call_ids else []

    history = merge_call_history(calls, callbacks, pca_rows)
    logger.info(
        "History for %s: %d calls, %d callbacks, %d interactions",
        phone_number,
        len(calls),
        len(callbacks),
        len(history),
    )
    return history


async def get_history_info(session: AsyncSession, call_id: str) -> dict[str, Any]:
    """Tell whether the number behind a call has more than one call."""

    call = await calls_repo.get_by_id(session, call_id)
    if call is None or not call.to_number:
        return {"has_history": False, "count": 0, "phone_number": None}

    count = await calls_repo.count_by_to_number(session, call.to_number)
    return {"has_history": count > 1, "count": count, "phone_number": call.to_number}

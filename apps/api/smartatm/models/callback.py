"""Callback model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Callback(Base):
    """Scheduled follow-up, optionally tied to the call that produced it."""

    __tablename__ = "callbacks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    call_id: Mapped[str | None] = mapped_column(String, index=True)
    lead_id: Mapped[str | None] = mapped_column(String)
    company_id: Mapped[str | None] = mapped_column(String)
    agent_id: Mapped[str | None] = mapped_column(String)
    agent_external_id: Mapped[str | None] = mapped_column(String)
    disposition: Mapped[str | None] = mapped_column(String)
    callback_owner_name: Mapped[str | None] = mapped_column(String)
    callback_owner_phone: Mapped[str | None] = mapped_column(String)
    callback_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    callback_time_text_raw: Mapped[str | None] = mapped_column(String)
    callback_window_note: Mapped[str | None] = mapped_column(String)
    lead_state: Mapped[str | None] = mapped_column(String)
    lead_city: Mapped[str | None] = mapped_column(String)
    lead_zip: Mapped[str | None] = mapped_column(String)
    call_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    caller_tz: Mapped[str | None] = mapped_column(String)
    tz_ambiguous: Mapped[bool | None] = mapped_column(Boolean)
    event_type: Mapped[str | None] = mapped_column(String)
    from_number: Mapped[str | None] = mapped_column(String)
    to_number: Mapped[str | None] = mapped_column(String, index=True)
    payload: Mapped[dict | None] = mapped_column(JSONB)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

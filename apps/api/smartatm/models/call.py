"""Call model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Call(Base):
    """Phone call placed by an agent; source of truth for caller metadata."""

    __tablename__ = "calls"

    call_id: Mapped[str] = mapped_column(String, primary_key=True)
    agent_id: Mapped[str | None] = mapped_column(String)
    agent_name: Mapped[str | None] = mapped_column(String)
    agent_external_id: Mapped[str | None] = mapped_column(String)
    disposition: Mapped[str | None] = mapped_column(String)
    business_name: Mapped[str | None] = mapped_column(String)
    owner_name: Mapped[str | None] = mapped_column(String)
    owner_phone: Mapped[str | None] = mapped_column(String)
    owner_email: Mapped[str | None] = mapped_column(String)
    location_type: Mapped[str | None] = mapped_column(String)
    address_street: Mapped[str | None] = mapped_column(String)
    address_city: Mapped[str | None] = mapped_column(String)
    address_state: Mapped[str | None] = mapped_column(String)
    address_zip: Mapped[str | None] = mapped_column(String)
    address_line2: Mapped[str | None] = mapped_column(String)
    business_hours: Mapped[str | None] = mapped_column(String)
    other_locations: Mapped[str | None] = mapped_column(String)
    agreed_amount: Mapped[float | None] = mapped_column(Float)
    monthly_amount: Mapped[float | None] = mapped_column(Float)
    yearly_amount: Mapped[float | None] = mapped_column(Float)
    company_key: Mapped[str | None] = mapped_column(String)
    from_number: Mapped[str | None] = mapped_column(String)
    to_number: Mapped[str | None] = mapped_column(String, index=True)
    call_successful: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)

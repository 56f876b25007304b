"""Post-call analysis model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class PCA(Base):
    """AI-derived analysis of a call. The newest row per call_id is authoritative."""

    __tablename__ = "pca"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    call_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    agent_name: Mapped[str | None] = mapped_column(String)
    agent_external_id: Mapped[str | None] = mapped_column(String)
    disposition: Mapped[str | None] = mapped_column(String)
    call_successful: Mapped[bool | None] = mapped_column(Boolean)
    user_sentiment: Mapped[str | None] = mapped_column(String)
    duration_ms: Mapped[int | None] = mapped_column(Integer)
    start_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    disconnection_reason: Mapped[str | None] = mapped_column(String)
    call_summary: Mapped[str | None] = mapped_column(Text)
    transcript: Mapped[str | None] = mapped_column(Text)
    recording_url: Mapped[str | None] = mapped_column(String)
    recording_multi_channel_url: Mapped[str | None] = mapped_column(String)
    public_log_url: Mapped[str | None] = mapped_column(String)
    call_cost: Mapped[float | None] = mapped_column(Float)
    analysis: Mapped[dict | None] = mapped_column(JSONB)
    custom_analysis_data: Mapped[dict | None] = mapped_column(JSONB)
    from_number: Mapped[str | None] = mapped_column(String)
    to_number: Mapped[str | None] = mapped_column(String, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

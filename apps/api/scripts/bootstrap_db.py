"""Create database schema and seed sample calls, analyses, callbacks and leads for development."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from smartatm.core.config import settings
from smartatm.core.logs import configure_logging
from smartatm.db.session import SessionLocal, engine
from smartatm.models import PCA, Call, Callback, Lead
from smartatm.models.base import Base

logger = logging.getLogger("bootstrap_db")

NOW = datetime.now(timezone.utc).replace(microsecond=0)

LEADS = [
	{
		"phone_number": "15551234567",
		"business_name": "Corner Market",
		"owner_name": "Dana Ruiz",
		"email": "dana@cornermarket.test",
		"address": "12 Elm St, Austin, TX",
		"timezone": "America/Chicago",
		"location_type": "retail",
	},
	{
		"phone_number": "5559876543",
		"business_name": "Blue Door Laundromat",
		"owner_name": "Sam Patel",
		"email": None,
		"address": "400 Harbor Ave, Tampa, FL",
		"timezone": "America/New_York",
		"location_type": "laundromat",
	},
	{
		"phone_number": "5550001111",
		"business_name": "Night Owl Bar",
		"owner_name": None,
		"email": None,
		"address": None,
		"timezone": "America/Denver",
		"location_type": "bar",
	},
]

CALLS = [
	{
		"call_id": "call_0001",
		"to_number": "+1 (555) 123-4567",
		"business_name": "Corner Market",
		"owner_name": "Dana Ruiz",
		"disposition": "no_answer",
		"agent_name": "Atlas",
		"created_at": NOW - timedelta(days=40),
	},
	{
		"call_id": "call_0002",
		"to_number": "+1 (555) 123-4567",
		"business_name": "Corner Market",
		"owner_name": "Dana Ruiz",
		"disposition": None,
		"agreed_amount": 150.0,
		"agent_name": "Atlas",
		"created_at": NOW - timedelta(days=3),
	},
	{
		"call_id": "call_0003",
		"to_number": "5559876543",
		"business_name": None,
		"owner_name": "Sam Patel",
		"disposition": "not_interested",
		"agent_name": "Orion",
		"created_at": NOW - timedelta(days=10),
	},
	{
		"call_id": "call_0004",
		"to_number": "5550001111",
		"business_name": "Night Owl Bar",
		"disposition": None,
		"agent_name": "Orion",
		"created_at": NOW - timedelta(days=1),
	},
]

PCA_ROWS = [
	{"id": "pca_0001", "call_id": "call_0001", "disposition": "no_answer", "duration_ms": 15_000, "days_ago": 40},
	{"id": "pca_0002", "call_id": "call_0002", "disposition": "possibly_interested", "duration_ms": 185_000, "days_ago": 3},
	{"id": "pca_0003", "call_id": "call_0003", "disposition": "not_interested", "duration_ms": 62_000, "days_ago": 10},
	{"id": "pca_0004", "call_id": "call_0004", "disposition": "possibly_interested", "duration_ms": 240_000, "days_ago": 1},
]

CALLBACKS = [
	{
		"id": "cb_0001",
		"call_id": "call_0002",
		"to_number": "+1 (555) 123-4567",
		"callback_owner_name": "Dana",
		"callback_time": NOW + timedelta(days=2),
		"callback_time_text_raw": "Thursday after 3pm",
		"disposition": "possibly_interested",
	},
	{
		"id": "cb_0002",
		"call_id": None,
		"to_number": "5559876543",
		"callback_owner_name": "Sam Patel",
		"callback_time": NOW + timedelta(days=5),
		"callback_time_text_raw": "next week",
		"disposition": None,
	},
]


async def create_schema() -> None:
	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_leads() -> None:
	"""Insert or update demo leads keyed by phone number."""

	async with SessionLocal() as session:
		async with session.begin():
			for lead_data in LEADS:
				result = await session.execute(select(Lead).where(Lead.phone_number == lead_data["phone_number"]))
				lead = result.scalar_one_or_none()
				if lead is None:
					session.add(Lead(**lead_data))
				else:
					for field, value in lead_data.items():
						setattr(lead, field, value)


async def seed_activity() -> None:
	"""Insert or update demo calls, their analyses and callbacks."""

	async with SessionLocal() as session:
		async with session.begin():
			for call_data in CALLS:
				await session.merge(Call(from_number="+15550100000", **call_data))

			for pca_data in PCA_ROWS:
				values = dict(pca_data)
				created_at = NOW - timedelta(days=values.pop("days_ago"))
				call = next(call for call in CALLS if call["call_id"] == values["call_id"])
				await session.merge(
					PCA(
						to_number=call["to_number"],
						call_successful=values["disposition"] == "possibly_interested",
						created_at=created_at,
						updated_at=created_at,
						**values,
					)
				)

			for callback_data in CALLBACKS:
				await session.merge(Callback(created_at=NOW, updated_at=NOW, **callback_data))


async def main() -> None:
	configure_logging(settings.log_level)
	await create_schema()
	await seed_leads()
	await seed_activity()
	logger.info("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())

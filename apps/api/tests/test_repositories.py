"""Repository statements compiled for Postgres."""
from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql

from smartatm.repositories import leads as leads_repo
from smartatm.repositories import pca as pca_repo

POSTGRES_MAX_PARAMS = 32767


class CapturingSession:
    """Records executed statements and answers with canned scalars."""

    def __init__(self, scalars_for=None) -> None:
        self.statements: list = []
        self._scalars_for = scalars_for or (lambda stmt: [])

    async def execute(self, stmt, *args, **kwargs):
        self.statements.append(stmt)
        rows = self._scalars_for(stmt)
        return SimpleNamespace(scalars=lambda: SimpleNamespace(all=lambda: rows))


def compiled(stmt):
    return stmt.compile(dialect=postgresql.dialect())


def inserted_phones(stmt) -> list[str]:
    return [value for key, value in compiled(stmt).params.items() if key.startswith("phone_number")]


def lead_record(index: int) -> dict[str, str | None]:
    return {
        "phone_number": f"555{index:07d}",
        "owner_name": f"Owner {index}",
        "business_name": f"Market {index}",
        "address": None,
        "location_type": "store",
        "timezone": "America/Chicago",
        "email": None,
    }


@pytest.mark.asyncio
async def test_large_import_is_split_under_parameter_limit() -> None:
    records = [lead_record(index) for index in range(5500)]
    session = CapturingSession(scalars_for=inserted_phones)

    inserted = await leads_repo.insert_ignoring_duplicates(session, records)

    assert len(session.statements) == 6
    for stmt in session.statements:
        assert len(compiled(stmt).params) <= POSTGRES_MAX_PARAMS
        assert "ON CONFLICT (phone_number) DO NOTHING" in str(compiled(stmt))
    assert sorted(inserted) == sorted(record["phone_number"] for record in records)


@pytest.mark.asyncio
async def test_import_without_records_runs_no_statement() -> None:
    session = CapturingSession()

    assert await leads_repo.insert_ignoring_duplicates(session, []) == []
    assert session.statements == []


@pytest.mark.asyncio
async def test_disposition_prequery_ignores_case() -> None:
    session = CapturingSession(scalars_for=lambda stmt: ["call_1", "call_1", None, "call_2"])

    call_ids = await pca_repo.call_ids_with_disposition(session, disposition="POSSIBLY_INTERESTED")

    assert call_ids == ["call_1", "call_2"]
    stmt = compiled(session.statements[0])
    assert "lower(pca.disposition) =" in str(stmt)
    assert "possibly_interested" in stmt.params.values()


@pytest.mark.asyncio
async def test_omitted_dispositions_ignore_case() -> None:
    session = CapturingSession(scalars_for=lambda stmt: ["5551234567", None])

    numbers = await pca_repo.numbers_with_dispositions(session, dispositions=["Not_Interested", "ai_detected"])

    assert numbers == ["5551234567"]
    stmt = compiled(session.statements[0])
    assert "lower(pca.disposition) IN" in str(stmt)
    assert ["not_interested", "ai_detected"] in list(stmt.params.values())

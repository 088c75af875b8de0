"""Integration tests for the append-only fixture store.

Runs against in-memory SQLite to check latest-by-updated_at reads and the
STORAGE lifecycle writes.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from fixtureid.db.models import Base, StoreFixtureModel
from fixtureid.db.repository import FixtureRepository, latest_by_fixture
from fixtureid.models import ReconcilePath, ReconciliationPlan

T0 = datetime(2025, 3, 1, 8, 0)
T1 = T0 + timedelta(days=7)
T2 = T0 + timedelta(days=14)


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    """Create in-memory database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


async def _row_count(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(StoreFixtureModel))).scalar_one()


def test_latest_by_fixture_keeps_newest_in_first_seen_order():
    rows = [
        SimpleNamespace(fixture_id="B2", updated_at=T0, brand="old"),
        SimpleNamespace(fixture_id="A1", updated_at=T1, brand="a"),
        SimpleNamespace(fixture_id="B2", updated_at=T2, brand="new"),
        SimpleNamespace(fixture_id="B2", updated_at=T1, brand="mid"),
    ]

    latest = latest_by_fixture(rows)

    assert [(r.fixture_id, r.brand) for r in latest] == [("B2", "new"), ("A1", "a")]


def test_latest_by_fixture_tie_keeps_first():
    rows = [
        SimpleNamespace(fixture_id="A1", updated_at=T0, brand="first"),
        SimpleNamespace(fixture_id="A1", updated_at=T0, brand="second"),
    ]
    assert latest_by_fixture(rows)[0].brand == "first"


@pytest.mark.asyncio
async def test_insert_and_fetch_latest(db_session: AsyncSession, make_fixture, store_id):
    """Re-inserting a fixture supersedes the earlier row on read."""
    repo = FixtureRepository(db_session)
    await repo.insert_fixtures([make_fixture("B2", "SHELF"), make_fixture("A1", "RACK")], now=T0)
    await repo.insert_fixtures([make_fixture("A1", "RACK", pos=(4, 4, 0), brand="Puma")], now=T1)
    await db_session.commit()

    fixtures = await repo.get_store_fixtures(store_id)

    assert [f.fixture_id for f in fixtures] == ["A1", "B2"]
    assert fixtures[0].brand == "Puma"
    assert fixtures[0].pos_x == 4.0
    assert fixtures[0].updated_at == T1
    assert await _row_count(db_session) == 3


@pytest.mark.asyncio
async def test_fetch_is_scoped_to_store(db_session: AsyncSession, make_fixture):
    repo = FixtureRepository(db_session)
    other = make_fixture("Z9").model_copy(update={"store_id": "TR-0001"})
    await repo.insert_fixtures([make_fixture("A1"), other], now=T0)
    await db_session.commit()

    assert [f.fixture_id for f in await repo.get_store_fixtures("TR-0001")] == ["Z9"]
    assert await repo.get_store_fixtures("TR-9999") == []


@pytest.mark.asyncio
async def test_move_to_storage_appends_storage_copy(db_session: AsyncSession, make_fixture, store_id):
    repo = FixtureRepository(db_session)
    await repo.insert_fixtures([make_fixture("A1", "RACK", pos=(2, 3, 0))], now=T0)
    existing = await repo.get_store_fixtures(store_id)

    moved = await repo.move_to_storage(["A1", "UNKNOWN"], existing, now=T1)
    await db_session.commit()

    assert moved == 1
    [archived] = await repo.get_store_fixtures(store_id)
    assert archived.is_archived
    assert (archived.pos_x, archived.pos_y) == (2.0, 3.0)
    assert archived.created_at == existing[0].created_at
    assert await _row_count(db_session) == 2


@pytest.mark.asyncio
async def test_apply_plan(db_session: AsyncSession, make_fixture, store_id):
    repo = FixtureRepository(db_session)
    await repo.insert_fixtures([make_fixture("A1", "RACK"), make_fixture("D4", "GONDOLA")], now=T0)
    existing = await repo.get_store_fixtures(store_id)

    plan = ReconciliationPlan(
        store_id=store_id,
        path=ReconcilePath.UPDATE_STORE,
        final_fixtures=[make_fixture("A1", "RACK", pos=(0.1, 0, 0))],
        archive_list=["D4"],
    )
    inserted, archived = await repo.apply_plan(plan, existing, now=T1)
    await db_session.commit()

    assert (inserted, archived) == (1, 1)
    by_id = {f.fixture_id: f for f in await repo.get_store_fixtures(store_id)}
    assert by_id["A1"].is_active
    assert by_id["A1"].pos_x == pytest.approx(0.1)
    assert by_id["D4"].is_archived


@pytest.mark.asyncio
async def test_rollback_discards_plan(db_session: AsyncSession, make_fixture, store_id):
    """Uncommitted writes vanish on rollback."""
    repo = FixtureRepository(db_session)
    await repo.insert_fixtures([make_fixture("A1")], now=T0)
    await db_session.rollback()

    assert await repo.get_store_fixtures(store_id) == []


@pytest.mark.asyncio
async def test_timezone_aware_timestamps_accepted(db_session: AsyncSession, make_fixture, store_id):
    repo = FixtureRepository(db_session)
    await repo.insert_fixtures([make_fixture("A1")], now=datetime(2025, 6, 1, tzinfo=timezone.utc))
    await db_session.commit()

    assert len(await repo.get_store_fixtures(store_id)) == 1

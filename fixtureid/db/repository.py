"""Read and write fixture identity records for a store."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import TypeVar

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fixtureid.db.models import StoreFixtureModel
from fixtureid.errors import PersistenceError
from fixtureid.models import STORAGE_BRAND, PersistedFixture, ReconciliationPlan

logger = structlog.get_logger(__name__)

R = TypeVar("R")


def latest_by_fixture(rows: Iterable[R]) -> list[R]:
    """Keep the row with the greatest updated_at for each fixture_id.

    Output order follows the first appearance of each fixture_id.
    """
    latest: dict[str, R] = {}
    for row in rows:
        current = latest.get(row.fixture_id)
        if current is None or row.updated_at > current.updated_at:
            latest[row.fixture_id] = row
    return list(latest.values())


def _to_persisted(row: StoreFixtureModel) -> PersistedFixture:
    return PersistedFixture(
        fixture_id=row.fixture_id,
        store_id=row.store_id,
        fixture_type=row.fixture_type,
        brand=row.brand,
        floor_index=row.floor_index,
        pos_x=row.pos_x,
        pos_y=row.pos_y,
        pos_z=row.pos_z,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_row(fixture: PersistedFixture, updated_at: datetime, brand: str | None = None) -> StoreFixtureModel:
    return StoreFixtureModel(
        fixture_id=fixture.fixture_id,
        store_id=fixture.store_id,
        fixture_type=fixture.fixture_type,
        brand=brand or fixture.brand,
        floor_index=fixture.floor_index,
        pos_x=fixture.pos_x,
        pos_y=fixture.pos_y,
        pos_z=fixture.pos_z,
        created_at=fixture.created_at,
        updated_at=updated_at,
    )


class FixtureRepository:
    """Append-only access to store_fixture_ids."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_store_fixtures(self, store_id: str) -> list[PersistedFixture]:
        """Latest record per fixture_id for a store, ordered by fixture_id.

        Raises:
            PersistenceError: If the query fails
        """
        stmt = (
            select(StoreFixtureModel)
            .where(StoreFixtureModel.store_id == store_id)
            .order_by(StoreFixtureModel.fixture_id.asc(), StoreFixtureModel.updated_at.desc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch fixtures for store {store_id}: {e}") from e

        rows = result.scalars().all()
        latest = latest_by_fixture(rows)
        logger.info(
            "store_fixtures_fetched",
            store_id=store_id,
            rows=len(rows),
            fixtures=len(latest),
        )
        return [_to_persisted(row) for row in latest]

    async def insert_fixtures(
        self, fixtures: Sequence[PersistedFixture], now: datetime | None = None
    ) -> int:
        """Append one new row per fixture, stamped with updated_at=now."""
        now = now or datetime.now(timezone.utc)
        self.session.add_all([_to_row(f, now) for f in fixtures])
        await self._flush()
        return len(fixtures)

    async def move_to_storage(
        self,
        fixture_ids: Sequence[str],
        existing: Sequence[PersistedFixture],
        now: datetime | None = None,
    ) -> int:
        """Append a STORAGE-branded copy of each fixture's latest record.

        Ids missing from ``existing`` are skipped.
        """
        now = now or datetime.now(timezone.utc)
        by_id = {f.fixture_id: f for f in existing}
        rows = [
            _to_row(by_id[fid], now, brand=STORAGE_BRAND)
            for fid in fixture_ids
            if fid in by_id
        ]
        self.session.add_all(rows)
        await self._flush()
        return len(rows)

    async def apply_plan(
        self,
        plan: ReconciliationPlan,
        existing: Sequence[PersistedFixture],
        now: datetime | None = None,
    ) -> tuple[int, int]:
        """Write a reconciliation plan: final fixtures, then archive moves.

        Does not commit; the session owner commits or rolls back the whole plan.

        Returns:
            Tuple of (inserted, archived)
        """
        now = now or datetime.now(timezone.utc)
        inserted = await self.insert_fixtures(plan.final_fixtures, now)
        archived = await self.move_to_storage(plan.archive_list, existing, now)
        logger.info("plan_applied", store_id=plan.store_id, inserted=inserted, archived=archived)
        return inserted, archived

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write fixtures: {e}") from e

"""Assign identities to additions from pooled donors.

Donor priority is fixed: fixtures deleted in this pass first, then fixtures
archived in earlier passes, then a freshly generated id. The two pools are
searched independently and in that order, never merged into one nearest
search. Both pools are consumed as additions are resolved, so one pass must
run to completion before another touches the same store.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

import structlog

from fixtureid.models import FixtureObservation, PersistedFixture
from fixtureid.reconcile.candidates import find_closest
from fixtureid.reconcile.identifiers import generate_fixture_id
from fixtureid.reconcile.types import Assignment, AssignmentResult, DonorSource

logger = structlog.get_logger(__name__)


class DonorPool:
    """Consumable collection of reuse donors keyed by fixture_id."""

    def __init__(self, name: DonorSource, fixtures: Sequence[PersistedFixture]) -> None:
        self.name = name
        self._fixtures = list(fixtures)
        self.used_ids: set[str] = set()

    def available(self) -> list[PersistedFixture]:
        return [f for f in self._fixtures if f.fixture_id not in self.used_ids]

    def take_closest(self, target: FixtureObservation) -> PersistedFixture | None:
        """Consume and return the closest type-compatible donor, if any."""
        donor = find_closest(target, self.available())
        if donor is not None:
            self.used_ids.add(donor.fixture_id)
        return donor

    def __len__(self) -> int:
        return len(self._fixtures) - len(self.used_ids)


def assign_additions(
    additions: Sequence[FixtureObservation],
    deletion_pool: Sequence[PersistedFixture],
    archive_pool: Sequence[PersistedFixture],
    now: datetime | None = None,
    id_factory: Callable[[], str] = generate_fixture_id,
) -> AssignmentResult:
    """Resolve a fixture_id and created_at for every addition, in input order.

    Args:
        additions: Observations with no same-slot active fixture
        deletion_pool: Active fixtures unmatched in this pass
        archive_pool: Fixtures already in STORAGE
        now: created_at for freshly generated ids (default: current UTC time)
        id_factory: Fresh id generator

    Returns:
        AssignmentResult with per-addition assignments and consumed donor ids
    """
    now = now or datetime.now(timezone.utc)
    temp = DonorPool(DonorSource.DELETION_POOL, deletion_pool)
    storage = DonorPool(DonorSource.ARCHIVE_POOL, archive_pool)
    result = AssignmentResult()

    logger.info("assignment_pools", deletion_pool=len(temp), archive_pool=len(storage))

    for addition in additions:
        assignment = None
        for pool in (temp, storage):
            donor = pool.take_closest(addition)
            if donor is None:
                continue
            assignment = Assignment(
                observation=addition,
                fixture_id=donor.fixture_id,
                created_at=donor.created_at,
                source=pool.name,
            )
            break

        if assignment is None:
            assignment = Assignment(
                observation=addition,
                fixture_id=id_factory(),
                created_at=now,
                source=DonorSource.GENERATED,
            )

        logger.debug(
            "addition_assigned",
            fixture_id=assignment.fixture_id,
            fixture_type=addition.effective_type,
            floor_index=addition.floor_index,
            source=assignment.source.value,
        )
        result.assignments.append(assignment)

    result.used_deletion_ids = set(temp.used_ids)
    result.used_archive_ids = set(storage.used_ids)

    logger.info(
        "additions_assigned",
        total=len(result.assignments),
        from_deletions=len(result.used_deletion_ids),
        from_archive=len(result.used_archive_ids),
        generated=result.count(DonorSource.GENERATED),
    )
    return result

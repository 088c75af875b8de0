"""Fixture identity reconciliation for a store republish.

Coordinates: new-store path (fresh ids for everything) or update-store path
(classify against active fixtures -> reuse ids from this pass's deletions ->
reuse ids from STORAGE -> generate). Produces a plan; the caller commits it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

import structlog

from fixtureid.config import get_config
from fixtureid.models import (
    FixtureObservation,
    PersistedFixture,
    ReconcilePath,
    ReconciliationPlan,
)
from fixtureid.reconcile.classifier import classify
from fixtureid.reconcile.identifiers import generate_fixture_id
from fixtureid.reconcile.reassigner import assign_additions
from fixtureid.reconcile.types import DonorSource

logger = structlog.get_logger(__name__)


class ReconciliationEngine:
    """Computes stable fixture identities for one store at a time."""

    def __init__(
        self,
        threshold: float | None = None,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            threshold: Same-slot distance (default: configured MATCH_THRESHOLD)
            id_factory: Fresh id generator (default: generate_fixture_id)
            clock: Timestamp source for new fixtures (default: UTC now)
        """
        config = get_config().reconcile
        self.threshold = config.match_threshold if threshold is None else threshold
        self.id_factory = id_factory or (
            lambda: generate_fixture_id(length=config.fixture_id_length)
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def reconcile(
        self,
        store_id: str,
        observations: Sequence[FixtureObservation],
        existing: Sequence[PersistedFixture],
        resolver: Callable[[str], str] | None = None,
        now: datetime | None = None,
    ) -> ReconciliationPlan:
        """Reconcile current observations against a store's persisted fixtures.

        Args:
            store_id: Store the fixtures belong to
            observations: Current fixtures in export row order
            existing: Latest persisted record per fixture_id (active and archived)
            resolver: Block name -> fixture type lookup
            now: created_at for fresh identities

        Returns:
            ReconciliationPlan with one final fixture per observation (in
            observation order) and the fixture_ids to move to STORAGE
        """
        now = now or self.clock()
        # One distinct object per row, even if the caller repeats an instance
        current = [o.resolved(resolver).model_copy() for o in observations]
        log = logger.bind(store_id=store_id)

        if not existing:
            plan = self._new_store(store_id, current, now)
            log.info("store_reconciled", path=plan.path.value, generated=plan.generated_count)
            return plan

        plan = self._update_store(store_id, current, existing, now)
        log.info(
            "store_reconciled",
            path=plan.path.value,
            unchanged=plan.unchanged_count,
            additions=plan.addition_count,
            deletions=plan.deletion_count,
            reused_from_deletions=plan.reused_from_deletions,
            reused_from_archive=plan.reused_from_archive,
            generated=plan.generated_count,
            archived=len(plan.archive_list),
        )
        return plan

    def _new_store(
        self, store_id: str, current: list[FixtureObservation], now: datetime
    ) -> ReconciliationPlan:
        final = [
            _to_record(store_id, obs, self.id_factory(), obs.effective_type, now)
            for obs in current
        ]
        return ReconciliationPlan(
            store_id=store_id,
            path=ReconcilePath.NEW_STORE,
            final_fixtures=final,
            addition_count=len(final),
            generated_count=len(final),
        )

    def _update_store(
        self,
        store_id: str,
        current: list[FixtureObservation],
        existing: Sequence[PersistedFixture],
        now: datetime,
    ) -> ReconciliationPlan:
        active = [f for f in existing if f.is_active]
        archived = [f for f in existing if f.is_archived]

        classification = classify(current, active, threshold=self.threshold)
        assigned = assign_additions(
            classification.additions,
            deletion_pool=classification.deletions,
            archive_pool=archived,
            now=now,
            id_factory=self.id_factory,
        )

        # Observations are shared by identity through every stage, so each
        # final record can be slotted back into export order.
        records: dict[int, PersistedFixture] = {}
        for obs, persisted in classification.unchanged:
            records[id(obs)] = _to_record(
                store_id, obs, persisted.fixture_id, persisted.fixture_type, persisted.created_at
            )
        for assignment in assigned.assignments:
            obs = assignment.observation
            records[id(obs)] = _to_record(
                store_id, obs, assignment.fixture_id, obs.effective_type, assignment.created_at
            )

        archive_list = [
            f.fixture_id
            for f in classification.deletions
            if f.fixture_id not in assigned.used_deletion_ids
        ]

        return ReconciliationPlan(
            store_id=store_id,
            path=ReconcilePath.UPDATE_STORE,
            final_fixtures=[records[id(obs)] for obs in current],
            archive_list=archive_list,
            unchanged_count=len(classification.unchanged),
            addition_count=len(classification.additions),
            deletion_count=len(classification.deletions),
            reused_from_deletions=assigned.count(DonorSource.DELETION_POOL),
            reused_from_archive=assigned.count(DonorSource.ARCHIVE_POOL),
            generated_count=assigned.count(DonorSource.GENERATED),
        )


def _to_record(
    store_id: str,
    obs: FixtureObservation,
    fixture_id: str,
    fixture_type: str,
    created_at: datetime,
) -> PersistedFixture:
    """Final fixture: identity carried forward, mutable fields from the observation."""
    return PersistedFixture(
        fixture_id=fixture_id,
        store_id=store_id,
        fixture_type=fixture_type,
        brand=obs.brand,
        floor_index=obs.floor_index,
        pos_x=obs.pos_x,
        pos_y=obs.pos_y,
        pos_z=obs.pos_z,
        created_at=created_at,
    )


def reconcile(
    store_id: str,
    observations: Sequence[FixtureObservation],
    existing: Sequence[PersistedFixture],
    resolver: Callable[[str], str] | None = None,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
    threshold: float | None = None,
) -> ReconciliationPlan:
    """Convenience function: reconcile one store with default settings."""
    engine = ReconciliationEngine(threshold=threshold, id_factory=id_factory)
    return engine.reconcile(store_id, observations, existing, resolver=resolver, now=now)

"""Classify current observations against the active fixture set.

Greedy first-match: observations are processed in export order and each
claims the first not-yet-consumed active fixture (in list order) that sits in
the same slot. This is not a nearest or globally optimal assignment; under
ambiguity the later observation becomes an addition.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import structlog

from fixtureid.models import FixtureObservation, PersistedFixture
from fixtureid.reconcile.geometry import DEFAULT_MATCH_THRESHOLD, is_fixture_match
from fixtureid.reconcile.types import Classification

logger = structlog.get_logger(__name__)


def classify(
    observations: Sequence[FixtureObservation],
    existing_active: Sequence[PersistedFixture],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    resolver: Callable[[str], str] | None = None,
) -> Classification:
    """Partition observations into unchanged / additions / deletions.

    Args:
        observations: Current fixtures in export row order
        existing_active: Persisted fixtures whose brand is not STORAGE
        threshold: Same-position distance in metres
        resolver: Block name -> fixture type lookup for unresolved observations

    Returns:
        Classification; every unconsumed active fixture becomes a deletion
    """
    result = Classification()
    consumed = [False] * len(existing_active)

    for observation in observations:
        current = observation.resolved(resolver)

        match_index = None
        for index, existing in enumerate(existing_active):
            if consumed[index]:
                continue
            if is_fixture_match(current, existing, threshold):
                match_index = index
                break

        if match_index is None:
            result.additions.append(current)
            logger.debug(
                "fixture_addition",
                fixture_type=current.effective_type,
                floor_index=current.floor_index,
                pos_x=round(current.pos_x, 2),
                pos_y=round(current.pos_y, 2),
            )
            continue

        consumed[match_index] = True
        result.unchanged.append((current, existing_active[match_index]))

    for index, existing in enumerate(existing_active):
        if consumed[index]:
            continue
        result.deletions.append(existing)
        logger.debug(
            "fixture_deletion",
            fixture_id=existing.fixture_id,
            fixture_type=existing.fixture_type,
            floor_index=existing.floor_index,
            pos_x=round(existing.pos_x, 2),
            pos_y=round(existing.pos_y, 2),
        )

    logger.info(
        "fixtures_classified",
        unchanged=len(result.unchanged),
        deletions=len(result.deletions),
        additions=len(result.additions),
    )
    return result

"""Nearest reuse-donor search."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from fixtureid.reconcile.geometry import distance_2d, fixture_type_of

T = TypeVar("T")


def find_closest(target, candidates: Sequence[T]) -> T | None:
    """Find the closest candidate of the same fixture type.

    Same-floor candidates are preferred; when none exist the search falls
    back to every other floor so a fixture keeps its identity across a floor
    renumbering. There is no distance cutoff. Ties go to the earliest
    candidate in list order.

    Args:
        target: Fixture to find a donor for
        candidates: Available donors (already filtered to unconsumed entries)

    Returns:
        Closest donor or None if no candidate shares the fixture type
    """
    target_type = fixture_type_of(target)
    matching_type = [c for c in candidates if fixture_type_of(c) == target_type]
    if not matching_type:
        return None

    same_floor = [c for c in matching_type if c.floor_index == target.floor_index]
    search = same_floor or [c for c in matching_type if c.floor_index != target.floor_index]

    closest = None
    min_distance = float("inf")
    for candidate in search:
        distance = distance_2d(target, candidate)
        if distance < min_distance:
            min_distance = distance
            closest = candidate

    return closest

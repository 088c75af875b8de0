"""Spatial matching predicates for fixture records.

Distances are measured in the horizontal (X, Y) plane only. Z carries
vertical placement noise from the export pipeline, and floor_index already
separates levels.
"""

from __future__ import annotations

import math
from typing import Protocol

DEFAULT_MATCH_THRESHOLD = 0.3  # metres


class Positioned(Protocol):
    """Anything with a fixture type, floor and horizontal position."""

    floor_index: int
    pos_x: float
    pos_y: float


def fixture_type_of(fixture: object) -> str | None:
    """Resolved fixture type of an observation or persisted record."""
    effective = getattr(fixture, "effective_type", None)
    if effective is not None:
        return effective
    return getattr(fixture, "fixture_type", None)


def distance_2d(a: Positioned, b: Positioned) -> float:
    """Euclidean distance between two fixtures in the X/Y plane."""
    return math.hypot(a.pos_x - b.pos_x, a.pos_y - b.pos_y)


def is_same_position(
    a: Positioned, b: Positioned, threshold: float = DEFAULT_MATCH_THRESHOLD
) -> bool:
    """True if the fixtures are within ``threshold`` of each other (inclusive)."""
    return distance_2d(a, b) <= threshold


def is_fixture_match(
    a: Positioned, b: Positioned, threshold: float = DEFAULT_MATCH_THRESHOLD
) -> bool:
    """Same slot: same fixture type, same floor and same position.

    Floors must match exactly; cross-floor continuity is only allowed when
    reusing pooled identities (see ``candidates.find_closest``).
    """
    return (
        fixture_type_of(a) == fixture_type_of(b)
        and a.floor_index == b.floor_index
        and is_same_position(a, b, threshold)
    )

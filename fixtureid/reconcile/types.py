"""Data passed between reconciliation stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from fixtureid.models import FixtureObservation, PersistedFixture


class DonorSource(str, Enum):
    """Where an addition's identity came from."""

    DELETION_POOL = "deletion-pool"
    ARCHIVE_POOL = "archive-pool"
    GENERATED = "generated"


@dataclass
class Classification:
    """Observations partitioned against the active fixture set."""

    unchanged: list[tuple[FixtureObservation, PersistedFixture]] = field(default_factory=list)
    deletions: list[PersistedFixture] = field(default_factory=list)
    additions: list[FixtureObservation] = field(default_factory=list)


@dataclass
class Assignment:
    """Identity resolved for one addition."""

    observation: FixtureObservation
    fixture_id: str
    created_at: datetime
    source: DonorSource


@dataclass
class AssignmentResult:
    """Output of the pooled reassigner."""

    assignments: list[Assignment] = field(default_factory=list)
    used_deletion_ids: set[str] = field(default_factory=set)
    used_archive_ids: set[str] = field(default_factory=set)

    def count(self, source: DonorSource) -> int:
        return sum(1 for a in self.assignments if a.source == source)

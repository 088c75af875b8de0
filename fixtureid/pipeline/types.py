"""Type definitions for make-live pipeline runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from fixtureid.models import ReconciliationPlan


class RunStatus(str, Enum):
    """Status of one store's pipeline run."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    DRY_RUN = "DRY_RUN"


@dataclass
class StoreJob:
    """One store to publish: its id and its location-master CSV text."""

    store_id: str
    csv_text: str


@dataclass
class StoreRunResult:
    """Result of one store's pipeline run."""

    store_id: str
    status: RunStatus
    plan: Optional[ReconciliationPlan] = None
    updated_csv: Optional[str] = None
    message: str = ""
    error_details: Optional[dict] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        """Check if the run completed (committed or previewed)."""
        return self.status in (RunStatus.SUCCESS, RunStatus.DRY_RUN)


@dataclass
class BatchSummary:
    """Aggregate of a batch of store runs."""

    results: list[StoreRunResult] = field(default_factory=list)

    def _count(self, status: RunStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(RunStatus.SUCCESS) + self._count(RunStatus.DRY_RUN)

    @property
    def failed(self) -> int:
        return self._count(RunStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(RunStatus.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.results)

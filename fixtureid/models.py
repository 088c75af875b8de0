"""Pydantic models for fixture identity reconciliation.

A store's fixture layout arrives as ordered observations (one per row of the
location-master export) and is reconciled against the persisted fixture
records of that store.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

STORAGE_BRAND = "STORAGE"  # Soft-deleted fixtures, identity kept for reuse
DEFAULT_BRAND = "unknown"

FIXTURE_ID_PATTERN = re.compile(r"^[A-Z0-9]+$")


class ReconcilePath(str, Enum):
    """Which reconciliation path produced a plan."""

    NEW_STORE = "new-store"
    UPDATE_STORE = "update-store"


class FixtureObservation(BaseModel):
    """One fixture row from the latest CAD export."""

    block_name: str
    fixture_type: str | None = None  # Resolved from block_name; None until resolved
    floor_index: int = 0
    pos_x: float = 0.0
    pos_y: float = 0.0
    pos_z: float = 0.0
    brand: str = DEFAULT_BRAND
    row_index: int | None = None  # Position in the source CSV (0-based, header excluded)

    @field_validator("brand", mode="before")
    @classmethod
    def default_blank_brand(cls, v: str | None) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_BRAND
        return str(v).strip()

    def resolved(self, resolver: Callable[[str], str] | None = None) -> FixtureObservation:
        """Return a copy with fixture_type filled in.

        Unmapped block names fall back to the block name itself.
        """
        if self.fixture_type is not None:
            return self
        fixture_type = resolver(self.block_name) if resolver else self.block_name
        return self.model_copy(update={"fixture_type": fixture_type or self.block_name})

    @property
    def effective_type(self) -> str:
        return self.fixture_type or self.block_name

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "block_name": "RTL-4W",
                "fixture_type": "4-WAY",
                "floor_index": 0,
                "pos_x": 12.5,
                "pos_y": 3.25,
                "pos_z": 0.0,
                "brand": "Levis",
            }
        }


class PersistedFixture(BaseModel):
    """A fixture identity previously stored for a store."""

    fixture_id: str
    store_id: str
    fixture_type: str
    brand: str = DEFAULT_BRAND
    floor_index: int = 0
    pos_x: float = 0.0
    pos_y: float = 0.0
    pos_z: float = 0.0
    created_at: datetime
    updated_at: datetime | None = None  # Stamped by the store on insert

    @field_validator("fixture_id")
    @classmethod
    def validate_fixture_id(cls, v: str) -> str:
        if not FIXTURE_ID_PATTERN.match(v):
            raise ValueError(
                f"fixture_id must be uppercase alphanumeric, got {v!r}"
            )
        return v

    @property
    def is_archived(self) -> bool:
        """Archived fixtures sit in the STORAGE pool."""
        return self.brand == STORAGE_BRAND

    @property
    def is_active(self) -> bool:
        return not self.is_archived

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "fixture_id": "A1B2C3D4E5",
                "store_id": "TR-1042",
                "fixture_type": "4-WAY",
                "brand": "Levis",
                "floor_index": 0,
                "pos_x": 12.5,
                "pos_y": 3.25,
                "pos_z": 0.0,
                "created_at": "2025-03-01T10:30:00Z",
            }
        }


class ReconciliationPlan(BaseModel):
    """Outcome of one reconciliation pass; committed by the caller."""

    store_id: str
    path: ReconcilePath
    final_fixtures: list[PersistedFixture] = Field(default_factory=list)
    archive_list: list[str] = Field(default_factory=list)

    # Diagnostics
    unchanged_count: int = 0
    addition_count: int = 0
    deletion_count: int = 0
    reused_from_deletions: int = 0
    reused_from_archive: int = 0
    generated_count: int = 0

    @property
    def fixture_ids(self) -> list[str]:
        """Fixture ids in observation order (for the export write-back)."""
        return [f.fixture_id for f in self.final_fixtures]

    @property
    def is_noop(self) -> bool:
        """True when the pass changed no identities."""
        return (
            self.path == ReconcilePath.UPDATE_STORE
            and self.addition_count == 0
            and not self.archive_list
        )

    class Config:
        json_schema_extra = {
            "example": {
                "store_id": "TR-1042",
                "path": "update-store",
                "final_fixtures": [],
                "archive_list": ["Z9Y8X7W6V5"],
                "unchanged_count": 41,
                "addition_count": 2,
                "deletion_count": 3,
                "reused_from_deletions": 2,
                "reused_from_archive": 0,
                "generated_count": 0,
            }
        }

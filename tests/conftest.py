"""Pytest configuration and fixtures for fixtureid tests.

Provides factories for observations and persisted fixtures.
"""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import count

import pytest

from fixtureid.config import reset_config
from fixtureid.models import FixtureObservation, PersistedFixture

CREATED = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def store_id() -> str:
    """Test store code."""
    return "TR-1042"


@pytest.fixture
def now() -> datetime:
    """Fixed reconciliation timestamp."""
    return NOW


@pytest.fixture
def make_obs():
    """Factory for FixtureObservation with a resolved fixture type."""

    def _make(
        fixture_type: str = "RACK",
        floor: int = 0,
        pos: tuple[float, float, float] = (0.0, 0.0, 0.0),
        brand: str = "Levis",
        block_name: str | None = None,
        row_index: int | None = None,
    ) -> FixtureObservation:
        return FixtureObservation(
            block_name=block_name or fixture_type,
            fixture_type=fixture_type,
            floor_index=floor,
            pos_x=pos[0],
            pos_y=pos[1],
            pos_z=pos[2],
            brand=brand,
            row_index=row_index,
        )

    return _make


@pytest.fixture
def make_fixture(store_id: str):
    """Factory for PersistedFixture."""

    def _make(
        fixture_id: str,
        fixture_type: str = "RACK",
        floor: int = 0,
        pos: tuple[float, float, float] = (0.0, 0.0, 0.0),
        brand: str = "Levis",
        created_at: datetime = CREATED,
        updated_at: datetime | None = None,
    ) -> PersistedFixture:
        return PersistedFixture(
            fixture_id=fixture_id,
            store_id=store_id,
            fixture_type=fixture_type,
            brand=brand,
            floor_index=floor,
            pos_x=pos[0],
            pos_y=pos[1],
            pos_z=pos[2],
            created_at=created_at,
            updated_at=updated_at,
        )

    return _make


@pytest.fixture
def id_factory():
    """Deterministic fresh-id generator: NEW0000001, NEW0000002, ..."""
    counter = count(1)

    def _next() -> str:
        return f"NEW{next(counter):07d}"

    return _next


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("MATCH_THRESHOLD", raising=False)
    reset_config()
    yield
    reset_config()

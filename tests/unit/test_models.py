"""Unit tests for fixtureid Pydantic models.

Tests data validation, field defaults, and model behavior.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fixtureid.models import (
    FixtureObservation,
    PersistedFixture,
    ReconcilePath,
    ReconciliationPlan,
)

CREATED = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


class TestFixtureObservation:
    """Test FixtureObservation model validation."""

    def test_defaults(self):
        obs = FixtureObservation(block_name="RTL-4W")

        assert obs.fixture_type is None
        assert obs.floor_index == 0
        assert (obs.pos_x, obs.pos_y, obs.pos_z) == (0.0, 0.0, 0.0)
        assert obs.brand == "unknown"
        assert obs.effective_type == "RTL-4W"

    @pytest.mark.parametrize("brand", ["", "   ", None])
    def test_blank_brand_becomes_unknown(self, brand):
        assert FixtureObservation(block_name="X", brand=brand).brand == "unknown"

    def test_resolved_uses_resolver(self):
        obs = FixtureObservation(block_name="RTL-4W")
        resolved = obs.resolved({"RTL-4W": "4-WAY"}.get)

        assert resolved.fixture_type == "4-WAY"
        assert obs.fixture_type is None

    def test_resolved_falls_back_to_block_name(self):
        obs = FixtureObservation(block_name="RTL-XX")

        assert obs.resolved({}.get).fixture_type == "RTL-XX"
        assert obs.resolved().fixture_type == "RTL-XX"

    def test_resolved_keeps_existing_type(self):
        obs = FixtureObservation(block_name="RTL-4W", fixture_type="RACK")
        assert obs.resolved({"RTL-4W": "4-WAY"}.get) is obs

    def test_frozen(self):
        obs = FixtureObservation(block_name="RTL-4W")
        with pytest.raises(ValidationError):
            obs.pos_x = 1.0


class TestPersistedFixture:
    """Test PersistedFixture model validation."""

    def _make(self, **overrides) -> PersistedFixture:
        data = {
            "fixture_id": "A1B2C3D4E5",
            "store_id": "TR-1042",
            "fixture_type": "RACK",
            "brand": "Levis",
            "created_at": CREATED,
        }
        data.update(overrides)
        return PersistedFixture(**data)

    def test_valid(self):
        fixture = self._make()

        assert fixture.fixture_id == "A1B2C3D4E5"
        assert fixture.updated_at is None
        assert fixture.is_active
        assert not fixture.is_archived

    @pytest.mark.parametrize("fixture_id", ["", "abc123", "A1-B2", "A1 B2"])
    def test_invalid_fixture_id(self, fixture_id):
        with pytest.raises(ValidationError) as exc_info:
            self._make(fixture_id=fixture_id)

        assert "fixture_id" in str(exc_info.value)

    def test_storage_brand_is_archived(self):
        fixture = self._make(brand="STORAGE")

        assert fixture.is_archived
        assert not fixture.is_active


class TestReconciliationPlan:
    """Test plan helpers."""

    def _fixture(self, fixture_id: str) -> PersistedFixture:
        return PersistedFixture(
            fixture_id=fixture_id, store_id="TR-1042", fixture_type="RACK", created_at=CREATED
        )

    def test_fixture_ids_in_order(self):
        plan = ReconciliationPlan(
            store_id="TR-1042",
            path=ReconcilePath.NEW_STORE,
            final_fixtures=[self._fixture("B2"), self._fixture("A1")],
        )
        assert plan.fixture_ids == ["B2", "A1"]

    def test_is_noop(self):
        plan = ReconciliationPlan(store_id="TR-1042", path=ReconcilePath.UPDATE_STORE, unchanged_count=3)
        assert plan.is_noop

    def test_archive_is_not_noop(self):
        plan = ReconciliationPlan(
            store_id="TR-1042", path=ReconcilePath.UPDATE_STORE, archive_list=["A1"]
        )
        assert not plan.is_noop

    def test_new_store_is_not_noop(self):
        plan = ReconciliationPlan(store_id="TR-1042", path=ReconcilePath.NEW_STORE)
        assert not plan.is_noop

    def test_path_serializes_as_value(self):
        plan = ReconciliationPlan(store_id="TR-1042", path=ReconcilePath.UPDATE_STORE)
        assert plan.model_dump(mode="json")["path"] == "update-store"

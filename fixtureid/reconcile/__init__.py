"""Fixture identity reconciliation engine."""

from fixtureid.reconcile.candidates import find_closest
from fixtureid.reconcile.classifier import classify
from fixtureid.reconcile.geometry import distance_2d, is_fixture_match, is_same_position
from fixtureid.reconcile.identifiers import generate_fixture_id
from fixtureid.reconcile.orchestrator import ReconciliationEngine, reconcile
from fixtureid.reconcile.reassigner import assign_additions

__all__ = [
    "ReconciliationEngine",
    "assign_additions",
    "classify",
    "distance_2d",
    "find_closest",
    "generate_fixture_id",
    "is_fixture_match",
    "is_same_position",
    "reconcile",
]

"""Exceptions raised by the fixtureid pipeline.

The reconciliation engine itself never raises under normal operation; these
cover the surrounding fetch / parse / persist steps, each of which aborts the
store being processed.
"""

from __future__ import annotations


class FixtureIdError(Exception):
    """Base class for pipeline failures that abort a single store."""


class LocationMasterError(FixtureIdError):
    """Location-master export is missing or cannot be parsed."""


class BlockTypeFetchError(FixtureIdError):
    """Block-type mapping could not be fetched."""


class PersistenceError(FixtureIdError):
    """Reading or committing fixture records failed."""

"""Location-master CSV parsing and fixture-id write-back.

Column layout of the export (0-based):
- 0: block name
- 1: floor index
- 5, 6, 7: position x / y / z
- 11: brand
- 14: fixture id (written back after reconciliation)

Rows with fewer than 14 columns are dropped silently.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from fixtureid.errors import LocationMasterError
from fixtureid.models import DEFAULT_BRAND, FixtureObservation

logger = structlog.get_logger(__name__)

BLOCK_NAME_COL = 0
FLOOR_INDEX_COL = 1
POS_X_COL, POS_Y_COL, POS_Z_COL = 5, 6, 7
BRAND_COL = 11
MIN_COLUMNS = 14
FIXTURE_ID_COL = 14
FIXTURE_ID_HEADER = "Fixture ID"


@dataclass
class LocationMaster:
    """Parsed export: header, raw rows and the observations derived from them."""

    header: list[str]
    rows: list[list[str]] = field(default_factory=list)
    observations: list[FixtureObservation] = field(default_factory=list)


def _get_int(values: list[str], index: int) -> int:
    try:
        return int(float(values[index].strip()))
    except (ValueError, OverflowError, IndexError):
        return 0


def _get_float(values: list[str], index: int) -> float:
    try:
        value = float(values[index].strip())
    except (ValueError, IndexError):
        return 0.0
    return value if value == value else 0.0  # NaN -> 0.0


def parse_location_master(text: str, min_columns: int = MIN_COLUMNS) -> LocationMaster:
    """Parse location-master CSV text into ordered observations.

    Args:
        text: CSV content including the header row
        min_columns: Rows shorter than this are dropped

    Returns:
        LocationMaster with one observation per kept row

    Raises:
        LocationMasterError: If the file has no header row
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise LocationMasterError("location-master.csv is empty (no header row)")

    reader = csv.reader(io.StringIO("\n".join(lines)))
    header = [col.strip() for col in next(reader)]
    master = LocationMaster(header=header)

    dropped = 0
    for values in reader:
        if len(values) < min_columns:
            dropped += 1
            continue

        master.observations.append(
            FixtureObservation(
                block_name=values[BLOCK_NAME_COL].strip(),
                floor_index=_get_int(values, FLOOR_INDEX_COL),
                pos_x=_get_float(values, POS_X_COL),
                pos_y=_get_float(values, POS_Y_COL),
                pos_z=_get_float(values, POS_Z_COL),
                brand=values[BRAND_COL].strip() or DEFAULT_BRAND,
                row_index=len(master.rows),
            )
        )
        master.rows.append(values)

    logger.info(
        "location_master_parsed",
        fixtures=len(master.observations),
        dropped_rows=dropped,
    )
    return master


def read_location_master(path: Path, min_columns: int = MIN_COLUMNS) -> LocationMaster:
    """Read and parse a location-master CSV file.

    Raises:
        LocationMasterError: If the file is missing or empty
    """
    if not path.exists():
        raise LocationMasterError(f"Location master not found: {path}")
    return parse_location_master(path.read_text(encoding="utf-8-sig"), min_columns)


def write_fixture_ids(
    master: LocationMaster,
    fixture_ids: Sequence[str],
    column: int = FIXTURE_ID_COL,
) -> str:
    """Render the export with each row's fixture id in the fixture-id column.

    ``fixture_ids`` is in observation order; ids are applied through each
    observation's row_index. Other cells are preserved.

    Raises:
        ValueError: If the number of ids does not match the observations
    """
    if len(fixture_ids) != len(master.observations):
        raise ValueError(
            f"Expected {len(master.observations)} fixture ids, got {len(fixture_ids)}"
        )

    header = list(master.header)
    if len(header) <= column or not header[column]:
        while len(header) < column:
            header.append("")
        if len(header) == column:
            header.append(FIXTURE_ID_HEADER)
        else:
            header[column] = FIXTURE_ID_HEADER

    rows = [list(row) for row in master.rows]
    for obs, fixture_id in zip(master.observations, fixture_ids):
        values = rows[obs.row_index]
        while len(values) < column:
            values.append("")
        if len(values) > column:
            values[column] = fixture_id
        else:
            values.append(fixture_id)

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()

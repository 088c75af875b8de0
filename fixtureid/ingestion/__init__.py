"""Location-master parsing and fixture-type resolution."""

from fixtureid.ingestion.block_types import (
    BlockTypeClient,
    FixtureTypeResolver,
    parse_block_type_mapping,
)
from fixtureid.ingestion.location_master import (
    LocationMaster,
    parse_location_master,
    read_location_master,
    write_fixture_ids,
)

__all__ = [
    "BlockTypeClient",
    "FixtureTypeResolver",
    "LocationMaster",
    "parse_block_type_mapping",
    "parse_location_master",
    "read_location_master",
    "write_fixture_ids",
]

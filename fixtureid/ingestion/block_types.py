"""Block name -> fixture type resolution.

The block-type endpoint has returned three response shapes over time:
- {"block_fixture_types": {"RTL-4W": "4-WAY", ...}}
- [{"blockName": "RTL-4W", "fixtureType": "4-WAY"}, ...] (or snake_case keys)
- {"RTL-4W": "4-WAY", ...}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from fixtureid.config import get_config
from fixtureid.errors import BlockTypeFetchError

logger = structlog.get_logger(__name__)


def parse_block_type_mapping(payload: Any) -> dict[str, str]:
    """Build a block name -> fixture type dict from an endpoint payload.

    Entries whose fixture type is not a string are ignored.
    """
    mapping: dict[str, str] = {}

    if isinstance(payload, dict) and isinstance(payload.get("block_fixture_types"), dict):
        source = payload["block_fixture_types"]
        mapping.update({k: v for k, v in source.items() if isinstance(v, str)})
    elif isinstance(payload, list):
        for record in payload:
            if not isinstance(record, dict):
                continue
            block = record.get("blockName") or record.get("block_name")
            fixture_type = record.get("fixtureType") or record.get("fixture_type")
            if block and isinstance(fixture_type, str) and fixture_type:
                mapping[block] = fixture_type
    elif isinstance(payload, dict):
        mapping.update({k: v for k, v in payload.items() if isinstance(v, str)})

    return mapping


class FixtureTypeResolver:
    """Resolve block names to fixture types; unmapped names map to themselves."""

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        self.mapping = dict(mapping or {})

    def resolve(self, block_name: str) -> str:
        return self.mapping.get(block_name, block_name)

    def __call__(self, block_name: str) -> str:
        return self.resolve(block_name)

    def __len__(self) -> int:
        return len(self.mapping)


class BlockTypeClient:
    """Client for the block-type mapping endpoint."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            url: Endpoint URL (default: BLOCK_TYPES_URL)
            timeout: Request timeout in seconds (default: BLOCK_TYPES_TIMEOUT)
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        config = get_config().ingest
        self.url = url or config.block_types_url
        self.client = client or httpx.AsyncClient(timeout=timeout or config.block_types_timeout)
        self._cache: FixtureTypeResolver | None = None

    async def fetch_resolver(self) -> FixtureTypeResolver:
        """Fetch the mapping once and cache it for this client.

        Raises:
            BlockTypeFetchError: On transport errors, non-2xx status or invalid JSON
        """
        if self._cache is not None:
            return self._cache

        try:
            response = await self.client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise BlockTypeFetchError(
                f"Failed to fetch fixture blocks: {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise BlockTypeFetchError(f"Failed to fetch fixture blocks: {e}") from e

        self._cache = FixtureTypeResolver(parse_block_type_mapping(payload))
        logger.info("block_types_loaded", mappings=len(self._cache))
        return self._cache

    async def aclose(self) -> None:
        await self.client.aclose()

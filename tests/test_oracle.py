from __future__ import annotations

import pytest

from sitecache.config import CacheConfig
from sitecache.oracle import VersionOracle


@pytest.mark.asyncio
async def test_known_version_is_trimmed_and_fetched_without_cache(config: CacheConfig, origin) -> None:
    oracle = VersionOracle(config, origin)

    assert await oracle.fetch_version() == "1.0"
    assert origin.calls == [("GET", "/version.txt", True)]


@pytest.mark.asyncio
async def test_transport_failure_is_unknown(config: CacheConfig, origin) -> None:
    origin.online = False

    assert await VersionOracle(config, origin).fetch_version() is None


@pytest.mark.asyncio
async def test_non_success_status_is_unknown(config: CacheConfig, origin) -> None:
    origin.version = None  # origin answers 404

    assert await VersionOracle(config, origin).fetch_version() is None


@pytest.mark.asyncio
async def test_blank_body_is_unknown(config: CacheConfig, origin) -> None:
    origin.version = "   "

    assert await VersionOracle(config, origin).fetch_version() is None

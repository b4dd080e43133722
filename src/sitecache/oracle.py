"""Authoritative version lookup."""

from __future__ import annotations

import logging

from sitecache._transport import Transport
from sitecache.config import CacheConfig
from sitecache.exceptions import TransportFailure
from sitecache.models.http import Request

_logger = logging.getLogger(__name__)


class VersionOracle:
    """Fetch the site's current build identifier from the version resource.

    ``fetch_version`` returns ``None`` when the version is unknown: the
    origin is unreachable, answered with a non-success status, or served an
    empty file. Callers must read ``None`` as "no information", not as
    "no new version".
    """

    def __init__(self, config: CacheConfig, transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def fetch_version(self) -> str | None:
        path = self._config.version_path
        try:
            resp = await self._transport.fetch(Request(path=path), no_cache=True)
        except TransportFailure as exc:
            _logger.warning("Version fetch failed (offline?): %s", exc)
            return None

        if not resp.ok:
            _logger.warning("Version fetch returned HTTP %d", resp.status)
            return None

        version = resp.text().strip()
        if not version:
            _logger.warning("Version resource %s is empty", path)
            return None

        _logger.debug("Fetched %s -> %s", path, version)
        return version

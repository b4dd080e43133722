"""Versioned snapshot operations on top of a :class:`SnapshotBackend`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sitecache._transport import Transport
from sitecache.config import CacheConfig
from sitecache.exceptions import AssetMissingError, TransportFailure
from sitecache.manifest import AssetManifest
from sitecache.models.http import Request, StoredResponse
from sitecache.store.base import Snapshot, SnapshotBackend

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PopulateReport:
    """Outcome of a best-effort population run."""

    version: str
    stored: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


class SnapshotStore:
    """Create, fill, query and prune per-version snapshots.

    Snapshot names follow ``<cache_prefix><version>``. Backend names without
    the prefix belong to someone else and are never touched.
    """

    def __init__(self, config: CacheConfig, backend: SnapshotBackend, transport: Transport) -> None:
        self._config = config
        self._backend = backend
        self._transport = transport

    def _version_of(self, name: str) -> str | None:
        prefix = self._config.cache_prefix
        if not name.startswith(prefix):
            return None
        return name[len(prefix) :]

    async def open(self, version: str) -> Snapshot:
        return await self._backend.open(self._config.snapshot_name(version))

    async def lookup(self, version: str, key: str) -> StoredResponse | None:
        snapshot = await self._backend.get(self._config.snapshot_name(version))
        if snapshot is None:
            return None
        return await snapshot.match(key)

    async def has_entry(self, version: str, key: str) -> bool:
        return await self.lookup(version, key) is not None

    async def put(self, version: str, key: str, response: StoredResponse) -> None:
        snapshot = await self.open(version)
        await snapshot.put(key, response)

    async def _capture(self, path: str) -> StoredResponse:
        try:
            resp = await self._transport.fetch(Request(path=path), no_cache=True)
        except TransportFailure as exc:
            raise AssetMissingError(str(exc), path=path) from exc
        if not resp.ok:
            raise AssetMissingError(f"HTTP {resp.status} for {path}", status_code=resp.status, path=path)
        return resp

    async def populate(self, version: str, manifest: AssetManifest) -> PopulateReport:
        """Fetch every manifest entry into the snapshot for *version*.

        A failing entry is logged and skipped; it never aborts the run.
        """
        _logger.debug("Populating snapshot for version %s (%d assets)", version, len(manifest))
        snapshot = await self.open(version)
        report = PopulateReport(version=version)
        for path in manifest.paths:
            try:
                resp = await self._capture(path)
            except AssetMissingError as exc:
                _logger.warning("Populate miss %s for version %s: %s", path, version, exc)
                report.missing.append(path)
                continue
            await snapshot.put(path, resp)
            report.stored.append(path)
        _logger.info(
            "Populated snapshot %s: %d stored, %d missing",
            snapshot.name,
            len(report.stored),
            len(report.missing),
        )
        return report

    async def purge_except(self, keep_version: str) -> list[str]:
        """Delete every prefixed snapshot other than the one for *keep_version*."""
        keep = self._config.snapshot_name(keep_version)
        deleted: list[str] = []
        for name in await self._backend.names():
            if name == keep or self._version_of(name) is None:
                continue
            if await self._backend.delete(name):
                _logger.debug("Deleted snapshot %s", name)
                deleted.append(name)
        return deleted

    async def list_all(self) -> list[tuple[str, Snapshot]]:
        """Retained ``(version, snapshot)`` pairs, most recently created first."""
        retained: list[tuple[str, Snapshot]] = []
        for name in reversed(await self._backend.names()):
            version = self._version_of(name)
            if version is None:
                continue
            snapshot = await self._backend.get(name)
            if snapshot is not None:
                retained.append((version, snapshot))
        return retained

    async def versions(self) -> list[str]:
        return [version for version, _ in await self.list_all()]

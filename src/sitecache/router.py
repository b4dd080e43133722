"""Per-request routing between snapshots and the network."""

from __future__ import annotations

import html
import logging

from sitecache._tasks import BackgroundTasks
from sitecache._transport import Transport
from sitecache.config import CacheConfig
from sitecache.controller import VersionController
from sitecache.exceptions import SiteCacheError, SnapshotStoreError, TotalUnavailableError, TransportFailure
from sitecache.models.http import Request, StoredResponse
from sitecache.state.model import ControllerState
from sitecache.store.snapshots import SnapshotStore

_logger = logging.getLogger(__name__)

_OFFLINE_TEMPLATE = (
    '<!DOCTYPE html><html><head><meta charset="utf-8"><title>Offline</title>'
    '<meta name="viewport" content="width=device-width,initial-scale=1">'
    "<style>body{{font-family:Arial,Helvetica,sans-serif;margin:40px;color:#222;text-align:center;}}"
    "h1{{font-size:26px;margin-bottom:10px;}}p{{opacity:.75;}}"
    "code{{background:#f2f2f2;padding:2px 4px;border-radius:4px;}}</style></head>"
    "<body><h1>Offline</h1><p>The page <code>{path}</code> is not cached.</p>"
    "<p>Try again when you are back online.</p></body></html>"
)


def offline_document(path: str) -> StoredResponse:
    """Minimal HTML page served when a navigation cannot be resolved."""
    body = _OFFLINE_TEMPLATE.format(path=html.escape(path))
    return StoredResponse(
        status=503,
        headers={"content-type": "text/html; charset=utf-8"},
        body=body.encode("utf-8"),
    )


def shell_candidates(path: str, shell_path: str, *, has_extension: bool) -> list[str]:
    """Ordered shell documents that may answer a navigation to *path*.

    Directory-style ``index.html`` first, then the path itself, then the
    root shell.
    """
    candidates: list[str] = []
    if path != "/" and not has_extension:
        candidates.append(f"{path}index.html" if path.endswith("/") else f"{path}/index.html")
    if path.endswith("/"):
        candidates.append(f"{path}index.html")
    candidates.append(path)
    candidates.append(shell_path)
    return list(dict.fromkeys(candidates))


class RequestRouter:
    """Map each inbound request to a snapshot, the network, or a fallback.

    Only the first request of a cold worker waits for the version check;
    every later trigger runs in the background.
    """

    def __init__(
        self,
        config: CacheConfig,
        state: ControllerState,
        controller: VersionController,
        store: SnapshotStore,
        transport: Transport,
        tasks: BackgroundTasks,
    ) -> None:
        self._config = config
        self._state = state
        self._controller = controller
        self._store = store
        self._transport = transport
        self._tasks = tasks
        self._warm = not config.block_on_cold_start

    async def handle(self, request: Request) -> StoredResponse:
        if request.method != "GET":
            return await self._transport.fetch(request)

        if self._config.force_check_param in request.query:
            _logger.debug("Force-check parameter on %s", request.path)
            self._controller.force_check()

        if request.path == self._config.version_path:
            return await self._version_resource(request)

        if request.is_navigation or request.path == "/":
            return await self._navigate(request)

        return await self._asset(request)

    async def _trigger_check(self) -> None:
        if self._state.checked:
            return
        if not self._warm:
            self._warm = True
            try:
                await self._controller.ensure_checked()
            except SiteCacheError as exc:
                _logger.warning("Cold-start version check failed: %s", exc)
            return
        self._tasks.schedule(self._controller.ensure_checked, name="ensure_checked")

    async def _version_resource(self, request: Request) -> StoredResponse:
        try:
            return await self._transport.fetch(request, no_cache=True)
        except TransportFailure as exc:
            _logger.debug("Version resource offline (%s); answering %r", exc, self._state.active_version)
            return StoredResponse(
                status=200,
                headers={"content-type": "text/plain; charset=utf-8"},
                body=(self._state.active_version or "").encode("utf-8"),
            )

    async def _navigate(self, request: Request) -> StoredResponse:
        await self._trigger_check()
        path = request.path
        candidates = shell_candidates(path, self._config.shell_path, has_extension=request.has_extension)

        active = self._state.active_version
        if active is not None:
            await self._prefetch_page_shell(active, candidates)
            for candidate in candidates:
                hit = await self._store.lookup(active, candidate)
                if hit is not None:
                    return hit

        for version, snapshot in await self._store.list_all():
            if version == active:
                continue
            for candidate in candidates:
                hit = await snapshot.match(candidate)
                if hit is not None:
                    _logger.debug("Navigation %s served from snapshot %s", path, snapshot.name)
                    return hit

        try:
            return await self._transport.fetch(request)
        except TransportFailure:
            _logger.debug("Navigation %s unavailable offline", path)
            return offline_document(path)

    async def _prefetch_page_shell(self, version: str, candidates: list[str]) -> None:
        """Capture a sub-page's own index.html on first visit."""
        page_shell = next(
            (c for c in candidates if c.endswith("/index.html") and c != self._config.shell_path),
            None,
        )
        if page_shell is None or await self._store.has_entry(version, page_shell):
            return
        try:
            resp = await self._transport.fetch(Request(path=page_shell), no_cache=True)
        except TransportFailure:
            return
        if resp.ok:
            await self._store_quietly(version, page_shell, resp)

    async def _store_quietly(self, version: str, key: str, resp: StoredResponse) -> None:
        """Opportunistic write; a storage failure never fails the request."""
        try:
            await self._store.put(version, key, resp)
        except SnapshotStoreError as exc:
            _logger.warning("Could not cache %s for version %s: %s", key, version, exc)
            return
        _logger.debug("Cached %s for version %s", key, version)

    async def _asset(self, request: Request) -> StoredResponse:
        await self._trigger_check()
        key = request.key

        active = self._state.active_version
        if active is not None:
            hit = await self._store.lookup(active, key)
            if hit is not None:
                return hit

        try:
            resp = await self._transport.fetch(request)
        except TransportFailure as exc:
            for _, snapshot in await self._store.list_all():
                hit = await snapshot.match(key)
                if hit is not None:
                    _logger.debug("Asset %s served offline from snapshot %s", key, snapshot.name)
                    return hit
            raise TotalUnavailableError(
                f"{key} is not cached and the network is unavailable",
                status_code=exc.status_code,
                path=key,
            ) from exc

        active = self._state.active_version
        if resp.ok and active is not None and key in self._controller.manifest:
            await self._store_quietly(active, key, resp)
        return resp

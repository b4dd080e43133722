"""High-level async cache worker."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from sitecache._tasks import BackgroundTasks
from sitecache._transport import HttpTransport, Transport
from sitecache.config import CacheConfig
from sitecache.controller import VersionController
from sitecache.exceptions import WorkerNotStartedError
from sitecache.models.http import Request, StoredResponse
from sitecache.models.messages import ForceCheckMessage, GetVersionMessage, parse_control_message
from sitecache.notifier import Session, SessionNotifier
from sitecache.oracle import VersionOracle
from sitecache.router import RequestRouter
from sitecache.state.model import ControllerState
from sitecache.state.policy import CheckOutcome
from sitecache.store.base import SnapshotBackend
from sitecache.store.filesystem import FileSystemBackend
from sitecache.store.memory import MemoryBackend
from sitecache.store.snapshots import SnapshotStore

_logger = logging.getLogger(__name__)

_NOT_STARTED = "Worker not started. Use 'async with CacheWorker(...) as worker:'"


class CacheWorker:
    """One worker instance: owns the controller state and every component.

    Usage::

        async with CacheWorker(config) as worker:
            await worker.install()
            await worker.activate()
            response = await worker.fetch(Request(path="/", mode="navigate"))

    ``transport`` and ``backend`` may be injected; otherwise an aiohttp
    transport is created and the backend is chosen from ``config.store_dir``.
    """

    def __init__(
        self,
        config: CacheConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        backend: SnapshotBackend | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._own_transport = transport is None
        if backend is None:
            backend = FileSystemBackend(config.store_dir) if config.store_dir is not None else MemoryBackend()
        self._backend = backend
        self._manifest = config.asset_manifest()
        self.state = ControllerState()
        self.tasks = BackgroundTasks()
        self.notifier = SessionNotifier(self.state)
        self._store: SnapshotStore | None = None
        self._controller: VersionController | None = None
        self._router: RequestRouter | None = None
        self._oracle: VersionOracle | None = None
        if transport is not None:
            self._wire(transport)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CacheWorker:
        if self._own_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._wire(HttpTransport(self._config, self._http_session))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.tasks.cancel_all()
        if self._own_transport:
            if not self._external_session and self._http_session is not None:
                await self._http_session.close()
                self._http_session = None
            self._transport = None
            self._oracle = None
            self._store = None
            self._controller = None
            self._router = None

    def _wire(self, transport: Transport) -> None:
        self._transport = transport
        self._oracle = VersionOracle(self._config, transport)
        self._store = SnapshotStore(self._config, self._backend, transport)
        self._controller = VersionController(
            self._config,
            self.state,
            self._oracle,
            self._store,
            self.notifier,
            self._manifest,
        )
        self._router = RequestRouter(
            self._config,
            self.state,
            self._controller,
            self._store,
            transport,
            self.tasks,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_router(self) -> RequestRouter:
        if self._router is None:
            raise WorkerNotStartedError(_NOT_STARTED)
        return self._router

    def _require_store(self) -> SnapshotStore:
        if self._store is None:
            raise WorkerNotStartedError(_NOT_STARTED)
        return self._store

    def _require_controller(self) -> VersionController:
        if self._controller is None:
            raise WorkerNotStartedError(_NOT_STARTED)
        return self._controller

    def _require_oracle(self) -> VersionOracle:
        if self._oracle is None:
            raise WorkerNotStartedError(_NOT_STARTED)
        return self._oracle

    @property
    def store(self) -> SnapshotStore:
        return self._require_store()

    @property
    def controller(self) -> VersionController:
        return self._require_controller()

    @property
    def oracle(self) -> VersionOracle:
        return self._require_oracle()

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    async def install(self) -> str | None:
        """Fetch the version once and eagerly populate its snapshot."""
        version = await self.oracle.fetch_version()
        if version is None:
            _logger.info("Installed without a known version (offline)")
            return None
        self.state.active_version = version
        await self.store.populate(version, self._manifest)
        return version

    async def activate(self) -> list[str]:
        """Drop every snapshot that does not belong to the active version."""
        version = self.state.active_version
        if version is None:
            return []
        return await self.store.purge_except(version)

    # ------------------------------------------------------------------
    # Requests and messages
    # ------------------------------------------------------------------

    async def fetch(self, request: Request) -> StoredResponse:
        return await self._require_router().handle(request)

    async def ensure_checked(self) -> CheckOutcome:
        return await self.controller.ensure_checked()

    def force_check(self) -> None:
        """Reset the epoch and start a live check in the background."""
        controller = self.controller
        controller.force_check()
        self.tasks.schedule(controller.ensure_checked, name="force_check")

    def connect(self, session: Session) -> None:
        self.notifier.connect(session)

    def disconnect(self, session: Session | str) -> None:
        self.notifier.disconnect(session)

    async def handle_message(self, data: Any, source: Session | None = None) -> None:
        """Dispatch a control message sent by a session."""
        message = parse_control_message(data)
        if message is None:
            _logger.debug("Ignoring unrecognised message %r", data)
            return
        if isinstance(message, ForceCheckMessage):
            _logger.info("%s received", message.type)
            self.force_check()
        elif isinstance(message, GetVersionMessage):
            await self.notifier.query_version(source)

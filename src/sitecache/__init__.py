"""sitecache - version-aware offline asset cache for a single-page site."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sitecache")
except PackageNotFoundError:
    __version__ = "0+local"
from sitecache.config import CacheConfig
from sitecache.controller import VersionController
from sitecache.exceptions import (
    AssetMissingError,
    SiteCacheConfigError,
    SiteCacheError,
    SnapshotStoreError,
    TotalUnavailableError,
    TransportFailure,
    WorkerNotStartedError,
)
from sitecache.manifest import DEFAULT_ASSETS, AssetManifest
from sitecache.models import (
    MessageType,
    Request,
    StoredResponse,
    VersionInfoMessage,
    VersionUpdateMessage,
)
from sitecache.notifier import Session, SessionNotifier
from sitecache.oracle import VersionOracle
from sitecache.router import RequestRouter
from sitecache.state import CheckOutcome, ControllerPhase, ControllerState
from sitecache.store import FileSystemBackend, MemoryBackend, PopulateReport, SnapshotStore
from sitecache.worker import CacheWorker

__all__ = [
    "__version__",
    "AssetManifest",
    "AssetMissingError",
    "CacheConfig",
    "CacheWorker",
    "CheckOutcome",
    "ControllerPhase",
    "ControllerState",
    "DEFAULT_ASSETS",
    "FileSystemBackend",
    "MemoryBackend",
    "MessageType",
    "PopulateReport",
    "Request",
    "RequestRouter",
    "Session",
    "SessionNotifier",
    "SiteCacheConfigError",
    "SiteCacheError",
    "SnapshotStore",
    "SnapshotStoreError",
    "StoredResponse",
    "TotalUnavailableError",
    "TransportFailure",
    "VersionController",
    "VersionInfoMessage",
    "VersionOracle",
    "VersionUpdateMessage",
    "WorkerNotStartedError",
]

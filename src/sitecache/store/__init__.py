"""Snapshot storage layer.

A snapshot is a named key -> response store bound to exactly one site
version. Backends provide the raw named stores; :class:`SnapshotStore`
adds the version naming convention, population and pruning.
"""

from sitecache.store.base import Snapshot, SnapshotBackend
from sitecache.store.filesystem import FileSystemBackend
from sitecache.store.memory import MemoryBackend
from sitecache.store.snapshots import PopulateReport, SnapshotStore

__all__ = [
    "FileSystemBackend",
    "MemoryBackend",
    "PopulateReport",
    "Snapshot",
    "SnapshotBackend",
    "SnapshotStore",
]

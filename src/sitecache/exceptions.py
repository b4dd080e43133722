"""Custom exception hierarchy for sitecache."""

from __future__ import annotations


class SiteCacheError(Exception):
    """Base exception for all sitecache errors."""


class SiteCacheConfigError(SiteCacheError):
    """Invalid or missing configuration."""


class TransportFailure(SiteCacheError):
    """Network-level failure (unreachable origin, aborted request, non-success status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str = "",
    ) -> None:
        self.status_code = status_code
        self.path = path
        super().__init__(message)


class AssetMissingError(TransportFailure):
    """A manifest entry could not be captured while populating a snapshot.

    Never fatal: the gap degrades to a network fetch on a later request.
    """


class TotalUnavailableError(TransportFailure):
    """Neither the network nor any retained snapshot could answer a request.

    Always chained from the underlying transport failure.
    """


class SnapshotStoreError(SiteCacheError):
    """The persistent snapshot area could not be opened, written or pruned."""


class WorkerNotStartedError(SiteCacheError):
    """Worker used outside of its ``async with`` block."""

"""Structural interfaces for snapshot backends."""

from __future__ import annotations

from typing import Protocol

from sitecache.models.http import StoredResponse


class Snapshot(Protocol):
    """One named key -> response store.

    Reads and writes are atomic per key.
    """

    @property
    def name(self) -> str: ...

    async def match(self, key: str) -> StoredResponse | None: ...

    async def put(self, key: str, response: StoredResponse) -> None: ...

    async def keys(self) -> list[str]: ...


class SnapshotBackend(Protocol):
    """The persistent area holding every named snapshot."""

    async def open(self, name: str) -> Snapshot:
        """Create-or-get the snapshot called *name*."""
        ...

    async def get(self, name: str) -> Snapshot | None:
        """Return the snapshot called *name* without creating it."""
        ...

    async def names(self) -> list[str]:
        """All snapshot names, oldest first."""
        ...

    async def delete(self, name: str) -> bool:
        """Delete *name*; ``False`` when it did not exist."""
        ...

"""In-memory snapshot backend."""

from __future__ import annotations

from sitecache.models.http import StoredResponse


class MemorySnapshot:
    def __init__(self, name: str) -> None:
        self._name = name
        self._entries: dict[str, StoredResponse] = {}

    @property
    def name(self) -> str:
        return self._name

    async def match(self, key: str) -> StoredResponse | None:
        return self._entries.get(key)

    async def put(self, key: str, response: StoredResponse) -> None:
        self._entries[key] = response

    async def keys(self) -> list[str]:
        return list(self._entries)


class MemoryBackend:
    """Dict-backed backend; snapshots live as long as the backend object.

    Sharing one instance between workers mimics a shared persistent area.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, MemorySnapshot] = {}

    async def open(self, name: str) -> MemorySnapshot:
        snapshot = self._snapshots.get(name)
        if snapshot is None:
            snapshot = MemorySnapshot(name)
            self._snapshots[name] = snapshot
        return snapshot

    async def get(self, name: str) -> MemorySnapshot | None:
        return self._snapshots.get(name)

    async def names(self) -> list[str]:
        return list(self._snapshots)

    async def delete(self, name: str) -> bool:
        return self._snapshots.pop(name, None) is not None

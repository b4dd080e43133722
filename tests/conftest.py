from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from sitecache.config import CacheConfig
from sitecache.exceptions import TransportFailure
from sitecache.models.http import Request, StoredResponse
from sitecache.store.memory import MemoryBackend
from sitecache.worker import CacheWorker

MANIFEST = ("/", "/index.html", "/style.css", "/app.js", "/home/index.html")


@dataclass
class FakeOrigin:
    """In-process stand-in for the site origin.

    Every served body embeds the current version so tests can tell which
    build a snapshot captured.
    """

    version: str | None = "1.0"
    paths: set[str] = field(default_factory=lambda: set(MANIFEST) | {"/extra.png", "/docs/index.html"})
    online: bool = True
    failing: set[str] = field(default_factory=set)
    calls: list[tuple[str, str, bool]] = field(default_factory=list)
    on_fetch: Callable[[Request], Any] | None = None

    def count(self, path: str) -> int:
        return sum(1 for _, p, _ in self.calls if p == path)

    def body_for(self, path: str) -> bytes:
        return f"{path} @ {self.version}".encode()

    async def fetch(self, request: Request, *, no_cache: bool = False) -> StoredResponse:
        self.calls.append((request.method, request.path, no_cache))
        if self.on_fetch is not None:
            result = self.on_fetch(request)
            if asyncio.iscoroutine(result):
                await result
        await asyncio.sleep(0)
        if not self.online or request.path in self.failing:
            raise TransportFailure(f"{request.path} unreachable", path=request.path)
        if request.method != "GET":
            return StoredResponse(status=201, body=b"posted:" + request.body)
        if request.path == "/version.txt":
            if self.version is None:
                return StoredResponse(status=404, body=b"missing")
            return StoredResponse(headers={"Content-Type": "text/plain"}, body=f"  {self.version}\n".encode())
        if request.path not in self.paths:
            return StoredResponse(status=404, body=b"not found")
        return StoredResponse(headers={"Content-Type": "text/html"}, body=self.body_for(request.path))


@dataclass
class FakeSession:
    session_id: str = "tab-1"
    controlled: bool = True
    broken: bool = False
    messages: list[dict[str, Any]] = field(default_factory=list)

    async def post_message(self, message: dict[str, Any]) -> None:
        if self.broken:
            raise ConnectionResetError("tab closed")
        self.messages.append(message)


@pytest.fixture
def config() -> CacheConfig:
    return CacheConfig(origin="http://origin.test", manifest=MANIFEST)


@pytest.fixture
def origin() -> FakeOrigin:
    return FakeOrigin()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    return FakeSession


@pytest.fixture
def make_worker(
    config: CacheConfig, origin: FakeOrigin, backend: MemoryBackend
) -> Callable[..., CacheWorker]:
    def _make(**overrides: Any) -> CacheWorker:
        cfg = dataclasses.replace(config, **overrides)
        return CacheWorker(cfg, transport=origin, backend=backend)

    return _make

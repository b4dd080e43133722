"""Directory-backed snapshot backend.

Layout::

    <root>/
        <sha256(snapshot name)>/
            snapshot.json           # {"name": <snapshot name>, "created_ns": ...}
            entries/
                <sha256(key)>.entry # one JSON metadata line, then the raw body

Every file is written to a temporary sibling and moved into place with
``os.replace`` so concurrent readers (possibly other processes sharing the
directory) see either the previous or the new entry, never a torn one.
Deletion renames the snapshot directory out of the listing before removing
it.

Blocking I/O runs in the event loop's default executor.
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import json
import logging
import os
import shutil
import tempfile
import time
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from sitecache.exceptions import SnapshotStoreError
from sitecache.models.http import StoredResponse

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_META_FILE = "snapshot.json"
_ENTRIES_DIR = "entries"
_ENTRY_SUFFIX = ".entry"
_TRASH_PREFIX = ".trash-"


def _atomic_write(path: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp)
        raise


def _entry_filename(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest() + _ENTRY_SUFFIX


def _encode_entry(key: str, response: StoredResponse) -> bytes:
    meta = {"key": key, "status": response.status, "headers": response.headers}
    return json.dumps(meta, separators=(",", ":")).encode("utf-8") + b"\n" + response.body


def _decode_entry(data: bytes) -> tuple[str, StoredResponse]:
    head, sep, body = data.partition(b"\n")
    if not sep:
        raise ValueError("entry has no metadata line")
    meta: dict[str, Any] = json.loads(head)
    return meta["key"], StoredResponse(status=meta["status"], headers=meta["headers"], body=body)


async def _run(fn: Callable[..., T], *args: Any) -> T:
    return await asyncio.get_running_loop().run_in_executor(None, fn, *args)


class FileSystemSnapshot:
    def __init__(self, name: str, directory: Path) -> None:
        self._name = name
        self._dir = directory
        self._entries = directory / _ENTRIES_DIR

    @property
    def name(self) -> str:
        return self._name

    def _match_sync(self, key: str) -> StoredResponse | None:
        path = self._entries / _entry_filename(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SnapshotStoreError(f"Cannot read {path}: {exc}") from exc
        try:
            stored_key, response = _decode_entry(data)
        except (ValueError, KeyError) as exc:
            _logger.warning("Ignoring corrupt entry %s in %s: %s", key, self._name, exc)
            return None
        if stored_key != key:
            return None
        return response

    def _put_sync(self, key: str, response: StoredResponse) -> None:
        try:
            _atomic_write(self._entries / _entry_filename(key), _encode_entry(key, response))
        except FileNotFoundError:
            # Snapshot was purged concurrently; writing into it is pointless.
            _logger.debug("Snapshot %s vanished before storing %s", self._name, key)
        except OSError as exc:
            raise SnapshotStoreError(f"Cannot store {key} in {self._name}: {exc}") from exc

    def _keys_sync(self) -> list[str]:
        keys: list[str] = []
        try:
            files = sorted(self._entries.glob(f"*{_ENTRY_SUFFIX}"))
        except FileNotFoundError:
            return keys
        for path in files:
            try:
                with path.open("rb") as fh:
                    head = fh.readline()
                keys.append(json.loads(head)["key"])
            except (OSError, ValueError, KeyError):
                continue
        return keys

    async def match(self, key: str) -> StoredResponse | None:
        return await _run(self._match_sync, key)

    async def put(self, key: str, response: StoredResponse) -> None:
        await _run(self._put_sync, key, response)

    async def keys(self) -> list[str]:
        return await _run(self._keys_sync)


class FileSystemBackend:
    """Persistent backend rooted at a directory shared by every worker of an origin."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _dir_for(self, name: str) -> Path:
        return self._root / hashlib.sha256(name.encode("utf-8")).hexdigest()

    def _read_meta(self, directory: Path) -> dict[str, Any] | None:
        try:
            meta: dict[str, Any] = json.loads((directory / _META_FILE).read_text("utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(meta.get("name"), str):
            return None
        return meta

    def _open_sync(self, name: str) -> FileSystemSnapshot:
        directory = self._dir_for(name)
        try:
            (directory / _ENTRIES_DIR).mkdir(parents=True, exist_ok=True)
            if self._read_meta(directory) is None:
                meta = {"name": name, "created_ns": time.time_ns()}
                _atomic_write(directory / _META_FILE, json.dumps(meta).encode("utf-8"))
                _logger.debug("Created snapshot %s at %s", name, directory)
        except OSError as exc:
            raise SnapshotStoreError(f"Cannot open snapshot {name}: {exc}") from exc
        return FileSystemSnapshot(name, directory)

    def _get_sync(self, name: str) -> FileSystemSnapshot | None:
        directory = self._dir_for(name)
        if self._read_meta(directory) is None:
            return None
        return FileSystemSnapshot(name, directory)

    def _names_sync(self) -> list[str]:
        try:
            children = list(self._root.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise SnapshotStoreError(f"Cannot list {self._root}: {exc}") from exc
        found: list[tuple[int, str]] = []
        for child in children:
            if child.name.startswith(".") or not child.is_dir():
                continue
            meta = self._read_meta(child)
            if meta is None:
                continue
            found.append((int(meta.get("created_ns", 0)), meta["name"]))
        found.sort()
        return [name for _, name in found]

    def _delete_sync(self, name: str) -> bool:
        directory = self._dir_for(name)
        trash = self._root / f"{_TRASH_PREFIX}{uuid.uuid4().hex}"
        try:
            os.replace(directory, trash)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise SnapshotStoreError(f"Cannot delete snapshot {name}: {exc}") from exc
        shutil.rmtree(trash, ignore_errors=True)
        return True

    async def open(self, name: str) -> FileSystemSnapshot:
        return await _run(self._open_sync, name)

    async def get(self, name: str) -> FileSystemSnapshot | None:
        return await _run(self._get_sync, name)

    async def names(self) -> list[str]:
        return await _run(self._names_sync)

    async def delete(self, name: str) -> bool:
        return await _run(self._delete_sync, name)

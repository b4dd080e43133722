"""Command-line entry point: ``sitecache {serve,check,snapshots,purge}``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path
from typing import Any

from sitecache.config import CacheConfig
from sitecache.exceptions import SiteCacheError
from sitecache.store.filesystem import FileSystemBackend
from sitecache.worker import CacheWorker


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitecache", description="Version-aware offline cache for a static site")
    parser.add_argument("--origin", help="Site origin URL (default: $SITECACHE_ORIGIN)")
    parser.add_argument("--store-dir", type=Path, help="Snapshot directory (default: $SITECACHE_STORE_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the caching proxy")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)

    sub.add_parser("check", help="Fetch and print the origin's current version")
    sub.add_parser("snapshots", help="List retained snapshots")

    purge = sub.add_parser("purge", help="Delete every snapshot except one version")
    purge.add_argument("keep", help="Version to keep")
    return parser


def _config_from_args(args: argparse.Namespace) -> CacheConfig:
    overrides: dict[str, Any] = {}
    if args.origin:
        overrides["origin"] = args.origin
    if args.store_dir:
        overrides["store_dir"] = args.store_dir
    return CacheConfig.from_env(**overrides)


async def _run(args: argparse.Namespace) -> int:
    config = _config_from_args(args)

    if args.command == "serve":
        from sitecache.server import serve

        async with CacheWorker(config) as worker:
            await serve(worker, host=args.host, port=args.port)
        return 0

    if args.command in {"snapshots", "purge"} and config.store_dir is None:
        print("A --store-dir is required for this command", file=sys.stderr)
        return 2

    async with CacheWorker(config) as worker:
        if args.command == "check":
            version = await worker.oracle.fetch_version()
            if version is None:
                print("unknown")
                return 1
            print(version)
            return 0

        if args.command == "snapshots":
            for version, snapshot in await worker.store.list_all():
                keys = await snapshot.keys()
                print(f"{version}\t{snapshot.name}\t{len(keys)} entries")
            return 0

        deleted = await worker.store.purge_except(args.keep)
        for name in deleted:
            print(f"deleted {name}")
        return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except SiteCacheError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        sys.exit(main())

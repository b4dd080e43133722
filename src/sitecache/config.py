"""Worker configuration for sitecache."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from sitecache._constants import CACHE_PREFIX, FORCE_CHECK_PARAM, SHELL_PATH, VERSION_PATH
from sitecache.exceptions import SiteCacheConfigError
from sitecache.manifest import DEFAULT_ASSETS, AssetManifest


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class CacheConfig:
    """Worker configuration.

    Parameters
    ----------
    origin : str
        Base URL of the site being cached (scheme + host, optional port).
    version_path : str
        Path of the plain-text version resource.
    cache_prefix : str
        Prefix of every snapshot name; a snapshot is ``<prefix><version>``.
    shell_path : str
        Root shell document, also the sentinel probed before priming.
    force_check_param : str
        Query parameter that forces a live version check.
    manifest : tuple of str
        Paths captured in every snapshot.
    store_dir : Path or None
        Directory for the filesystem snapshot backend. ``None`` keeps
        snapshots in memory only.
    request_timeout : float
        Total aiohttp timeout in seconds for a single origin request.
    block_on_cold_start : bool
        Await the very first version check instead of scheduling it.
    """

    origin: str = "http://127.0.0.1:8000"
    version_path: str = VERSION_PATH
    cache_prefix: str = CACHE_PREFIX
    shell_path: str = SHELL_PATH
    force_check_param: str = FORCE_CHECK_PARAM
    manifest: tuple[str, ...] = DEFAULT_ASSETS
    store_dir: Path | None = None
    request_timeout: float = 30.0
    block_on_cold_start: bool = True

    def __post_init__(self) -> None:
        parts = urlsplit(self.origin)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise SiteCacheConfigError(f"origin must be an http(s) URL, got {self.origin!r}")
        if not self.cache_prefix:
            raise SiteCacheConfigError("cache_prefix must be non-empty")
        for name in ("version_path", "shell_path"):
            value = getattr(self, name)
            if not value.startswith("/"):
                raise SiteCacheConfigError(f"{name} must be an absolute path, got {value!r}")
        if self.request_timeout <= 0:
            raise SiteCacheConfigError("request_timeout must be positive")
        # Validates paths and shell membership once, up front.
        self.asset_manifest()

    @property
    def base_url(self) -> str:
        return self.origin.rstrip("/")

    def asset_manifest(self) -> AssetManifest:
        """Return the manifest as a validated :class:`AssetManifest`."""
        try:
            return AssetManifest.from_paths(self.manifest, shell=self.shell_path)
        except ValueError as exc:
            raise SiteCacheConfigError(f"Invalid manifest: {exc}") from exc

    def snapshot_name(self, version: str) -> str:
        return f"{self.cache_prefix}{version}"

    @classmethod
    def from_env(cls, **overrides: Any) -> CacheConfig:
        """Create configuration from ``SITECACHE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "SITECACHE_ORIGIN": "origin",
            "SITECACHE_VERSION_PATH": "version_path",
            "SITECACHE_CACHE_PREFIX": "cache_prefix",
            "SITECACHE_SHELL_PATH": "shell_path",
            "SITECACHE_FORCE_CHECK_PARAM": "force_check_param",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        manifest_env = env.get("SITECACHE_MANIFEST")
        if manifest_env is not None and "manifest" not in overrides:
            config_kwargs["manifest"] = _env_list(manifest_env)

        store_env = env.get("SITECACHE_STORE_DIR")
        if store_env and "store_dir" not in overrides:
            config_kwargs["store_dir"] = Path(store_env)

        timeout_env = env.get("SITECACHE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise SiteCacheConfigError(f"SITECACHE_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "block_on_cold_start" not in overrides:
            config_kwargs["block_on_cold_start"] = _env_bool(env.get("SITECACHE_BLOCK_ON_COLD_START"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

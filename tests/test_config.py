from __future__ import annotations

from pathlib import Path

import pytest

from sitecache.config import CacheConfig
from sitecache.exceptions import SiteCacheConfigError
from sitecache.manifest import DEFAULT_ASSETS


def test_defaults_are_valid() -> None:
    config = CacheConfig()

    assert config.version_path == "/version.txt"
    assert config.snapshot_name("1.0") == "spw-v1.0"
    assert config.manifest == DEFAULT_ASSETS
    assert config.asset_manifest().shell == "/index.html"
    assert config.store_dir is None


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITECACHE_ORIGIN", "https://game.example.com/")
    monkeypatch.setenv("SITECACHE_CACHE_PREFIX", "game-v")
    monkeypatch.setenv("SITECACHE_MANIFEST", "/, /index.html ,/app.js")
    monkeypatch.setenv("SITECACHE_STORE_DIR", "/tmp/snapshots")
    monkeypatch.setenv("SITECACHE_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("SITECACHE_BLOCK_ON_COLD_START", "off")

    config = CacheConfig.from_env()

    assert config.base_url == "https://game.example.com"
    assert config.cache_prefix == "game-v"
    assert config.manifest == ("/", "/index.html", "/app.js")
    assert config.store_dir == Path("/tmp/snapshots")
    assert config.request_timeout == 5.0
    assert config.block_on_cold_start is False


def test_overrides_take_precedence_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITECACHE_ORIGIN", "https://env.example.com")
    monkeypatch.setenv("SITECACHE_REQUEST_TIMEOUT", "5")

    config = CacheConfig.from_env(origin="http://override.test", request_timeout=1.5)

    assert config.origin == "http://override.test"
    assert config.request_timeout == 1.5


def test_invalid_timeout_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SITECACHE_REQUEST_TIMEOUT", "soon")

    with pytest.raises(SiteCacheConfigError):
        CacheConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"origin": "ftp://files.example.com"},
        {"origin": "not a url"},
        {"cache_prefix": ""},
        {"version_path": "version.txt"},
        {"request_timeout": 0},
        {"manifest": ("/style.css",)},
        {"manifest": ("style.css", "/index.html")},
    ],
)
def test_invalid_configuration_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(SiteCacheConfigError):
        CacheConfig(**kwargs)  # type: ignore[arg-type]

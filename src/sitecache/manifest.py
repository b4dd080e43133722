"""The fixed list of resource paths captured in every snapshot."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from sitecache._constants import SHELL_PATH

#: Default asset list for the hosted Unity WebGL build.
#: The version resource is deliberately absent: it is always fetched live.
DEFAULT_ASSETS: tuple[str, ...] = (
    # Root shell
    "/",
    "/index.html",
    "/style.css",
    "/manifest.json",
    "/icon.png",
    "/sitemap.xml",
    # Build
    "/Build/SlopePlusWeb.asm.code.unityweb",
    "/Build/SlopePlusWeb.asm.framework.unityweb",
    "/Build/SlopePlusWeb.asm.memory.unityweb",
    "/Build/SlopePlusWeb.data.unityweb",
    "/Build/SlopePlusWeb.json",
    "/Build/SlopePlusWeb.wasm.code.unityweb",
    "/Build/SlopePlusWeb.wasm.framework.unityweb",
    "/Build/UnityLoader.js",
    # Patches
    "/Patches/mobile.js",
    "/Patches/settings.js",
    "/Patches/freezegame.js",
    # TemplateData
    "/TemplateData/style.css",
    "/TemplateData/UnityProgress.js",
    "/TemplateData/favicon.ico",
    "/TemplateData/fullscreen.png",
    "/TemplateData/progressEmpty.Dark.png",
    "/TemplateData/progressFull.Dark.png",
    "/TemplateData/progressLogo.Dark.png",
    "/TemplateData/webgl-logo.png",
    "/TemplateData/download.svg",
    # Home page
    "/home/index.html",
    "/home/style.css",
    "/home/icon.png",
    "/home/keyboard.png",
    "/home/play.png",
    "/home/wallpaper.png",
    "/home/github-icon.png",
    "/home/githubpushes.js",
    "/home/Inter18pt-Medium.woff",
    "/home/Inter18pt-Medium.woff2",
    "/home/Inter18pt-Regular.woff",
    "/home/Inter18pt-Regular.woff2",
    "/home/medium.ttf",
    "/home/regular.ttf",
    # PWA icons
    "/PWA/192.png",
    "/PWA/512.png",
    "/PWA/icon.png",
)


class AssetManifest(BaseModel):
    """Ordered, de-duplicated set of paths a snapshot should contain.

    ``shell`` is the sentinel asset probed to decide whether an existing
    snapshot is already populated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    paths: tuple[str, ...]
    shell: str = SHELL_PATH

    @field_validator("paths")
    @classmethod
    def _normalize_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for raw in value:
            path = raw.strip()
            if not path:
                continue
            if not path.startswith("/"):
                raise ValueError(f"manifest path must be absolute, got {raw!r}")
            seen.setdefault(path, None)
        if not seen:
            raise ValueError("manifest must contain at least one path")
        return tuple(seen)

    @model_validator(mode="after")
    def _shell_is_member(self) -> AssetManifest:
        if self.shell not in self.paths:
            raise ValueError(f"shell page {self.shell!r} is not a manifest member")
        return self

    @classmethod
    def from_paths(cls, paths: Iterable[str], *, shell: str = SHELL_PATH) -> AssetManifest:
        return cls(paths=tuple(paths), shell=shell)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __len__(self) -> int:
        return len(self.paths)

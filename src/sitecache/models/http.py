"""Request and stored-response models exchanged by router, store and transport."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _lower_keys(headers: Mapping[str, str]) -> dict[str, str]:
    return {str(k).lower(): str(v) for k, v in headers.items()}


class StoredResponse(BaseModel):
    """A response as received from the origin or kept in a snapshot.

    Header names are normalised to lowercase.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: int = 200
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("headers", mode="before")
    @classmethod
    def _normalize_headers(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return _lower_keys(value)
        return value

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")


class Request(BaseModel):
    """An inbound request as seen by the router.

    ``mode`` mirrors the browser fetch mode; ``"navigate"`` marks a
    top-level page load.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    method: str = "GET"
    query: dict[str, str] = Field(default_factory=dict)
    mode: str = "same-origin"
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        path = value.strip() or "/"
        if not path.startswith("/"):
            path = "/" + path
        return path

    @field_validator("headers", mode="before")
    @classmethod
    def _normalize_headers(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return _lower_keys(value)
        return value

    @property
    def key(self) -> str:
        """Method-less cache key (query string excluded)."""
        return self.path

    @property
    def is_navigation(self) -> bool:
        return self.mode == "navigate"

    @property
    def has_extension(self) -> bool:
        _, ext = posixpath.splitext(self.path)
        return len(ext) > 1 and ext[1:].isalnum()

"""HTTP transport towards the site origin."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Protocol
from urllib.parse import urlencode

import aiohttp

from sitecache._constants import HOP_BY_HOP_HEADERS, NO_CACHE_HEADERS, USER_AGENT
from sitecache._redact import redact_headers
from sitecache.config import CacheConfig
from sitecache.exceptions import TransportFailure
from sitecache.models.http import Request, StoredResponse

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the oracle, store and router.

    Implementations return the origin's response whatever its status and
    raise :class:`TransportFailure` only when no response was obtained.
    """

    async def fetch(self, request: Request, *, no_cache: bool = False) -> StoredResponse:
        ...


def _forwardable(headers: Mapping[str, str]) -> dict[str, str]:
    return {k.lower(): v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS and k.lower() != "host"}


class HttpTransport:
    """aiohttp-backed transport bound to one origin."""

    def __init__(self, config: CacheConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _url(self, request: Request) -> str:
        url = f"{self._config.base_url}{request.path}"
        if request.query:
            url = f"{url}?{urlencode(request.query)}"
        return url

    async def fetch(self, request: Request, *, no_cache: bool = False) -> StoredResponse:
        """Send *request* to the origin.

        With ``no_cache`` the request carries revalidation headers so no
        intermediate HTTP cache may answer it.
        """
        headers = _forwardable(request.headers)
        headers.setdefault("user-agent", USER_AGENT)
        if no_cache:
            headers.update(NO_CACHE_HEADERS)

        url = self._url(request)
        _logger.debug("%s %s headers=%s", request.method, url, redact_headers(headers))

        try:
            async with self._http.request(
                request.method,
                url,
                headers=headers,
                data=request.body or None,
                timeout=self._timeout,
                allow_redirects=True,
            ) as resp:
                body = await resp.read()
                return StoredResponse(
                    status=resp.status,
                    headers=_forwardable(resp.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportFailure(
                f"{request.method} {request.path} failed: {exc!r}",
                path=request.path,
            ) from exc

"""Local caching proxy exposing a :class:`CacheWorker` over HTTP.

Every request to the proxy is routed through the worker. Pages connect to
the websocket endpoint to receive ``VERSION_UPDATE`` notifications and to
send control messages; ``client.js`` is a drop-in script that does this and
reloads the page when a new build is announced.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any

from aiohttp import WSMsgType, web

from sitecache._constants import HOP_BY_HOP_HEADERS, WS_PATH
from sitecache.exceptions import TransportFailure
from sitecache.models.http import Request
from sitecache.worker import CacheWorker

_logger = logging.getLogger(__name__)

WORKER_KEY: web.AppKey[CacheWorker] = web.AppKey("sitecache_worker", CacheWorker)

CLIENT_SCRIPT_PATH = "/__sitecache__/client.js"

CLIENT_JS = """// sitecache session client: reload when a new build is announced.
(function () {
  var proto = location.protocol === 'https:' ? 'wss://' : 'ws://';
  var ws = new WebSocket(proto + location.host + '%(ws_path)s');
  var reloading = false;
  ws.addEventListener('message', function (evt) {
    var msg;
    try { msg = JSON.parse(evt.data); } catch (e) { return; }
    if (msg && msg.type === 'VERSION_UPDATE' && !reloading) {
      reloading = true;
      console.log('[sitecache] version', msg.version, '- reloading');
      location.reload();
    }
  });
  window.sitecache = {
    forceCheck: function () { ws.send(JSON.stringify({ type: 'FORCE_CHECK' })); },
    getVersion: function () { ws.send(JSON.stringify({ type: 'GET_VERSION' })); }
  };
})();
""" % {"ws_path": WS_PATH}


class WebSocketSession:
    """A browser page connected to the proxy's websocket endpoint."""

    def __init__(self, ws: web.WebSocketResponse, *, controlled: bool = True) -> None:
        self._ws = ws
        self._id = uuid.uuid4().hex
        self._controlled = controlled

    @property
    def session_id(self) -> str:
        return self._id

    @property
    def controlled(self) -> bool:
        return self._controlled

    async def post_message(self, message: dict[str, Any]) -> None:
        await self._ws.send_json(message)


def _navigation_mode(request: web.Request) -> str:
    mode = request.headers.get("Sec-Fetch-Mode")
    if mode:
        return mode
    # Clients without fetch metadata: a GET asking for HTML is a page load.
    if request.method == "GET" and "text/html" in request.headers.get("Accept", ""):
        return "navigate"
    return "same-origin"


async def _to_cache_request(request: web.Request) -> Request:
    body = await request.read() if request.can_read_body else b""
    return Request(
        path=request.path,
        method=request.method,
        query={k: v for k, v in request.query.items()},
        mode=_navigation_mode(request),
        headers={k: v for k, v in request.headers.items()},
        body=body,
    )


async def proxy_handler(request: web.Request) -> web.Response:
    worker = request.app[WORKER_KEY]
    cache_request = await _to_cache_request(request)
    try:
        resp = await worker.fetch(cache_request)
    except TransportFailure as exc:
        _logger.debug("Unavailable: %s", exc)
        return web.Response(status=502, text=f"Upstream unavailable: {cache_request.path}\n")
    headers = {k: v for k, v in resp.headers.items() if k not in HOP_BY_HOP_HEADERS}
    return web.Response(status=resp.status, headers=headers, body=resp.body)


async def client_script_handler(_request: web.Request) -> web.Response:
    return web.Response(text=CLIENT_JS, content_type="application/javascript")


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    worker = request.app[WORKER_KEY]
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    session = WebSocketSession(ws, controlled=request.query.get("controlled", "1") != "0")
    worker.connect(session)
    try:
        async for msg in ws:
            if msg.type != WSMsgType.TEXT:
                continue
            try:
                data = json.loads(msg.data)
            except json.JSONDecodeError:
                _logger.debug("Ignoring non-JSON message from %s", session.session_id)
                continue
            await worker.handle_message(data, session)
    finally:
        worker.disconnect(session)
    return ws


def create_app(worker: CacheWorker) -> web.Application:
    app = web.Application()
    app[WORKER_KEY] = worker
    app.router.add_get(WS_PATH, websocket_handler)
    app.router.add_get(CLIENT_SCRIPT_PATH, client_script_handler)
    app.router.add_route("*", "/{tail:.*}", proxy_handler)
    return app


async def serve(worker: CacheWorker, *, host: str = "127.0.0.1", port: int = 8080) -> None:
    """Install + activate the worker, then serve until cancelled."""
    await worker.install()
    await worker.activate()

    runner = web.AppRunner(create_app(worker))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    _logger.info("Serving %s on http://%s:%d", worker.state.active_version or "<unknown>", host, port)

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()

from __future__ import annotations

import pytest
from aiohttp import test_utils

from sitecache._constants import WS_PATH
from sitecache.server import CLIENT_SCRIPT_PATH, create_app


@pytest.mark.asyncio
async def test_page_load_served_from_snapshot(make_worker) -> None:
    worker = make_worker()
    await worker.ensure_checked()

    async with test_utils.TestClient(test_utils.TestServer(create_app(worker))) as client:
        root = await client.get("/", headers={"Accept": "text/html"})
        page = await client.get("/home", headers={"Sec-Fetch-Mode": "navigate"})

        assert root.status == 200
        assert await root.text() == "/index.html @ 1.0"
        assert root.headers["Content-Type"].startswith("text/html")
        assert await page.text() == "/home/index.html @ 1.0"


@pytest.mark.asyncio
async def test_offline_responses(make_worker, origin) -> None:
    worker = make_worker()
    await worker.ensure_checked()
    origin.online = False

    async with test_utils.TestClient(test_utils.TestServer(create_app(worker))) as client:
        missing = await client.get("/extra.png")
        probe = await client.get("/version.txt")
        asset = await client.get("/app.js")

        assert missing.status == 502
        assert "/extra.png" in await missing.text()
        assert probe.status == 200
        assert await probe.text() == "1.0"
        assert await asset.text() == "/app.js @ 1.0"


@pytest.mark.asyncio
async def test_post_is_forwarded(make_worker, origin) -> None:
    worker = make_worker()

    async with test_utils.TestClient(test_utils.TestServer(create_app(worker))) as client:
        resp = await client.post("/api/items", data=b"payload")

        assert resp.status == 201
        assert await resp.text() == "posted:payload"
    assert ("POST", "/api/items", False) in origin.calls


@pytest.mark.asyncio
async def test_client_script(make_worker) -> None:
    async with test_utils.TestClient(test_utils.TestServer(create_app(make_worker()))) as client:
        resp = await client.get(CLIENT_SCRIPT_PATH)

        assert resp.status == 200
        assert resp.content_type == "application/javascript"
        assert WS_PATH in await resp.text()


@pytest.mark.asyncio
async def test_websocket_control_channel(make_worker, origin) -> None:
    worker = make_worker()
    await worker.ensure_checked()

    async with test_utils.TestClient(test_utils.TestServer(create_app(worker))) as client:
        ws = await client.ws_connect(WS_PATH)

        await ws.send_str("not json")
        await ws.send_json({"type": "GET_VERSION"})
        assert await ws.receive_json(timeout=5) == {"type": "VERSION_INFO", "version": "1.0"}

        origin.version = "2.0"
        await ws.send_json({"type": "FORCE_CHECK"})
        assert await ws.receive_json(timeout=5) == {"type": "VERSION_UPDATE", "version": "2.0"}
        assert worker.state.active_version == "2.0"

        await ws.close()


@pytest.mark.asyncio
async def test_uncontrolled_page_still_receives_updates(make_worker, origin) -> None:
    worker = make_worker()
    await worker.ensure_checked()

    async with test_utils.TestClient(test_utils.TestServer(create_app(worker))) as client:
        ws = await client.ws_connect(WS_PATH, params={"controlled": "0"})
        await ws.send_json({"type": "GET_VERSION"})
        await ws.receive_json(timeout=5)

        assert worker.notifier.sessions(include_uncontrolled=False) == []
        assert len(worker.notifier.sessions()) == 1

        origin.version = "2.0"
        worker.force_check()
        assert await ws.receive_json(timeout=5) == {"type": "VERSION_UPDATE", "version": "2.0"}

        await ws.close()

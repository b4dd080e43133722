from __future__ import annotations

import pytest

from sitecache.notifier import SessionNotifier
from sitecache.state.model import ControllerState


@pytest.mark.asyncio
async def test_notify_reaches_every_session_once(make_session) -> None:
    state = ControllerState(active_version="2.0")
    notifier = SessionNotifier(state)
    tabs = [make_session(session_id="a"), make_session(session_id="b", controlled=False)]
    for tab in tabs:
        notifier.connect(tab)

    assert await notifier.notify("2.0") == 2
    assert await notifier.notify("2.0") == 0

    for tab in tabs:
        assert tab.messages == [{"type": "VERSION_UPDATE", "version": "2.0"}]


@pytest.mark.asyncio
async def test_reset_rearms_the_guard(make_session) -> None:
    notifier = SessionNotifier(ControllerState())
    tab = make_session()
    notifier.connect(tab)

    await notifier.notify("2.0")
    notifier.reset()
    await notifier.notify("3.0")

    assert [m["version"] for m in tab.messages] == ["2.0", "3.0"]


@pytest.mark.asyncio
async def test_failed_delivery_does_not_stop_broadcast(make_session) -> None:
    notifier = SessionNotifier(ControllerState())
    closed = make_session(session_id="closed", broken=True)
    open_tab = make_session(session_id="open")
    notifier.connect(closed)
    notifier.connect(open_tab)

    assert await notifier.notify("2.0") == 1
    assert open_tab.messages == [{"type": "VERSION_UPDATE", "version": "2.0"}]


def test_session_registry(make_session) -> None:
    notifier = SessionNotifier(ControllerState())
    a = make_session(session_id="a")
    b = make_session(session_id="b", controlled=False)
    notifier.connect(a)
    notifier.connect(b)

    assert notifier.sessions() == [a, b]
    assert notifier.sessions(include_uncontrolled=False) == [a]

    notifier.disconnect("a")
    notifier.disconnect(b)
    notifier.disconnect("never-connected")
    assert notifier.sessions() == []


@pytest.mark.asyncio
async def test_query_version_replies_to_requester(make_session) -> None:
    state = ControllerState()
    notifier = SessionNotifier(state)
    tab = make_session()

    assert await notifier.query_version(tab) is None
    state.active_version = "1.0"
    assert await notifier.query_version(tab) == "1.0"
    assert await notifier.query_version(None) == "1.0"

    assert tab.messages == [
        {"type": "VERSION_INFO", "version": None},
        {"type": "VERSION_INFO", "version": "1.0"},
    ]

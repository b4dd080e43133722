"""Broadcast version changes to connected sessions."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from sitecache.models.messages import VersionInfoMessage, VersionUpdateMessage
from sitecache.state.model import ControllerState

_logger = logging.getLogger(__name__)


class Session(Protocol):
    """A connected page. ``controlled`` is False for pages opened before the worker took over."""

    @property
    def session_id(self) -> str: ...

    @property
    def controlled(self) -> bool: ...

    async def post_message(self, message: dict[str, Any]) -> None: ...


class SessionNotifier:
    """Tracks connected sessions and announces version transitions.

    The ``notified`` flag of the shared :class:`ControllerState` guarantees a
    single broadcast per transition even when several requests race into the
    transition logic.
    """

    def __init__(self, state: ControllerState) -> None:
        self._state = state
        self._sessions: dict[str, Session] = {}

    def connect(self, session: Session) -> None:
        self._sessions[session.session_id] = session
        _logger.debug("Session %s connected (controlled=%s)", session.session_id, session.controlled)

    def disconnect(self, session: Session | str) -> None:
        session_id = session if isinstance(session, str) else session.session_id
        self._sessions.pop(session_id, None)

    def sessions(self, *, include_uncontrolled: bool = True) -> list[Session]:
        return [s for s in self._sessions.values() if include_uncontrolled or s.controlled]

    def reset(self) -> None:
        """Re-arm the guard so the next transition is announced."""
        self._state.notified = False

    async def notify(self, version: str) -> int:
        """Post ``VERSION_UPDATE`` to every session; returns the number reached."""
        if not self._state.claim_notification():
            _logger.debug("Version %s already announced", version)
            return 0

        message = VersionUpdateMessage(version=version).model_dump()
        delivered = 0
        for session in self.sessions(include_uncontrolled=True):
            try:
                await session.post_message(message)
            except Exception:
                _logger.debug("Dropping notification to session %s", session.session_id, exc_info=True)
                continue
            delivered += 1
        _logger.info("Announced version %s to %d session(s)", version, delivered)
        return delivered

    async def query_version(self, requester: Session | None) -> str | None:
        """Reply to ``GET_VERSION`` with the active version (or none)."""
        version = self._state.active_version
        if requester is not None:
            await requester.post_message(VersionInfoMessage(version=version).model_dump())
        return version

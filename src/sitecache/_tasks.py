"""Fire-and-forget background work with an inspectable history."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

_logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Schedule coroutines without awaiting them.

    Strong references are kept until each task finishes so the loop cannot
    garbage-collect it mid-flight. Failures are logged and swallowed; they
    never reach the code path that scheduled the work.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[Any]] = set()
        self.scheduled: list[str] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, factory: Callable[[], Awaitable[Any]], *, name: str) -> asyncio.Task[Any]:
        async def _runner() -> Any:
            try:
                return await factory()
            except asyncio.CancelledError:
                raise
            except Exception:
                _logger.debug("Background task %s failed", name, exc_info=True)
                return None

        task = asyncio.get_running_loop().create_task(_runner(), name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self.scheduled.append(name)
        return task

    async def drain(self) -> None:
        """Wait until every scheduled task, including ones scheduled meanwhile, is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

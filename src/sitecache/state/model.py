"""Process-wide controller state owned by one worker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ControllerPhase(StrEnum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


@dataclass(slots=True)
class ControllerState:
    """Mutable state shared by controller, router and notifier.

    ``checked`` closes the current epoch: while it is set no live version
    check runs. ``notified`` guards the broadcast of the current transition.
    Both are read and written without an intervening ``await``, which is what
    makes them safe on a single event loop.
    """

    active_version: str | None = None
    checked: bool = False
    notified: bool = False

    @property
    def phase(self) -> ControllerPhase:
        if self.active_version is None:
            return ControllerPhase.UNINITIALIZED
        return ControllerPhase.ACTIVE

    def claim_check(self) -> bool:
        """Close the epoch; ``True`` if this caller should run the check."""
        if self.checked:
            return False
        self.checked = True
        return True

    def claim_notification(self) -> bool:
        """Mark the transition announced; ``True`` if this caller should broadcast."""
        if self.notified:
            return False
        self.notified = True
        return True

    def reset_epoch(self) -> None:
        self.checked = False

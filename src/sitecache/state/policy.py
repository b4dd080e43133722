"""Deterministic version-transition policy.

This module performs no I/O. The controller executes the returned effects in
order, which keeps the decision logic testable without a network or store.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EffectKind(StrEnum):
    PRIME = "prime"  # populate only if the shell sentinel is missing
    POPULATE = "populate"
    PURGE = "purge"
    NOTIFY = "notify"


class CheckOutcome(StrEnum):
    SKIPPED = "skipped"
    UNKNOWN = "unknown"
    INITIALIZED = "initialized"
    UNCHANGED = "unchanged"
    CHANGED = "changed"


@dataclass(frozen=True, slots=True)
class Effect:
    kind: EffectKind
    version: str


@dataclass(frozen=True, slots=True)
class TransitionPlan:
    outcome: CheckOutcome
    next_version: str | None
    effects: tuple[Effect, ...] = ()


def plan_transition(active_version: str | None, latest: str | None) -> TransitionPlan:
    """Decide what a fresh oracle answer means for the active version.

    Policy:
    - unknown answer: nothing changes (offline path);
    - first known answer: adopt it and prime its snapshot;
    - same answer: nothing changes;
    - different answer: populate the new snapshot, then purge the others,
      then notify. The old snapshot is never deleted before the new one
      exists.
    """
    if latest is None:
        return TransitionPlan(CheckOutcome.UNKNOWN, active_version)

    if active_version is None:
        return TransitionPlan(
            CheckOutcome.INITIALIZED,
            latest,
            (Effect(EffectKind.PRIME, latest),),
        )

    if latest == active_version:
        return TransitionPlan(CheckOutcome.UNCHANGED, active_version)

    return TransitionPlan(
        CheckOutcome.CHANGED,
        latest,
        (
            Effect(EffectKind.POPULATE, latest),
            Effect(EffectKind.PURGE, latest),
            Effect(EffectKind.NOTIFY, latest),
        ),
    )

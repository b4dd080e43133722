"""Controller state and the pure version-transition policy.

This package is the single source of truth for which site version is
active and what must happen when the version oracle answers.
"""

from sitecache.state.model import ControllerPhase, ControllerState
from sitecache.state.policy import CheckOutcome, Effect, EffectKind, TransitionPlan, plan_transition

__all__ = [
    "CheckOutcome",
    "ControllerPhase",
    "ControllerState",
    "Effect",
    "EffectKind",
    "TransitionPlan",
    "plan_transition",
]

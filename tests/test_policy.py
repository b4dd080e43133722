from __future__ import annotations

from sitecache.state.model import ControllerPhase, ControllerState
from sitecache.state.policy import CheckOutcome, Effect, EffectKind, plan_transition


def test_unknown_answer_changes_nothing() -> None:
    for active in (None, "1.0"):
        plan = plan_transition(active, None)
        assert plan.outcome is CheckOutcome.UNKNOWN
        assert plan.next_version == active
        assert plan.effects == ()


def test_first_answer_primes_snapshot() -> None:
    plan = plan_transition(None, "1.0")

    assert plan.outcome is CheckOutcome.INITIALIZED
    assert plan.next_version == "1.0"
    assert plan.effects == (Effect(EffectKind.PRIME, "1.0"),)


def test_same_answer_is_a_no_op() -> None:
    plan = plan_transition("1.0", "1.0")

    assert plan.outcome is CheckOutcome.UNCHANGED
    assert plan.effects == ()


def test_new_answer_populates_before_purging_and_notifies_last() -> None:
    plan = plan_transition("1.0", "2.0")

    assert plan.outcome is CheckOutcome.CHANGED
    assert plan.next_version == "2.0"
    assert [e.kind for e in plan.effects] == [EffectKind.POPULATE, EffectKind.PURGE, EffectKind.NOTIFY]
    assert all(e.version == "2.0" for e in plan.effects)


def test_controller_state_guards() -> None:
    state = ControllerState()
    assert state.phase is ControllerPhase.UNINITIALIZED

    assert state.claim_check() is True
    assert state.claim_check() is False
    state.reset_epoch()
    assert state.claim_check() is True

    assert state.claim_notification() is True
    assert state.claim_notification() is False

    state.active_version = "1.0"
    assert state.phase is ControllerPhase.ACTIVE

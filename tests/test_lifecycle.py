import pytest

from medlink.modules.appointments.lifecycle import (
    TERMINAL,
    ApptStatus,
    InvalidTransition,
    TransitionForbidden,
    allowed_targets,
    check_transition,
)

P, C, X, D = ApptStatus.PENDING, ApptStatus.CONFIRMED, ApptStatus.CANCELLED, ApptStatus.COMPLETED


@pytest.mark.parametrize(
    "current, target, role",
    [
        (P, C, "doctor"),
        (P, C, "admin"),
        (P, X, "patient"),
        (P, X, "doctor"),
        (C, D, "doctor"),
        (C, X, "admin"),
    ],
)
def test_legal_edges(current, target, role):
    assert check_transition(current, target, role) is target


@pytest.mark.parametrize("current", sorted(TERMINAL, key=lambda s: s.value))
@pytest.mark.parametrize("target", list(ApptStatus))
def test_terminal_states_have_no_exit(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target, "admin")


@pytest.mark.parametrize(
    "current, target",
    [(C, P), (P, D), (P, P), (C, C)],
)
def test_backward_skipping_and_same_state_edges_are_illegal(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target, "admin")


@pytest.mark.parametrize(
    "current, target",
    [(P, C), (C, D), (C, X)],
)
def test_patient_may_only_cancel_pending(current, target):
    with pytest.raises(TransitionForbidden):
        check_transition(current, target, "patient")


def test_accepts_plain_strings():
    assert check_transition("PENDING", "CONFIRMED", "doctor") is C


def test_allowed_targets_for_ui():
    assert allowed_targets(P, "patient") == [X]
    assert set(allowed_targets(P, "doctor")) == {C, X}
    assert set(allowed_targets(C, "doctor")) == {D, X}
    assert allowed_targets(C, "patient") == []
    assert allowed_targets(D, "admin") == []

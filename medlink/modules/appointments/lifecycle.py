# medlink/modules/appointments/lifecycle.py
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, List


class ApptStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


TERMINAL: FrozenSet[ApptStatus] = frozenset({ApptStatus.COMPLETED, ApptStatus.CANCELLED})

# (from, to) -> roles allowed to trigger the edge. Anything missing is illegal.
TRANSITIONS: dict[tuple[ApptStatus, ApptStatus], FrozenSet[str]] = {
    (ApptStatus.PENDING, ApptStatus.CONFIRMED): frozenset({"doctor", "admin"}),
    (ApptStatus.PENDING, ApptStatus.CANCELLED): frozenset({"doctor", "admin", "patient"}),
    (ApptStatus.CONFIRMED, ApptStatus.COMPLETED): frozenset({"doctor", "admin"}),
    (ApptStatus.CONFIRMED, ApptStatus.CANCELLED): frozenset({"doctor", "admin"}),
}


class InvalidTransition(Exception):
    """The requested edge does not exist (backward, same-state or from a terminal state)."""


class TransitionForbidden(Exception):
    """The edge exists but the actor's role may not trigger it."""


def check_transition(current: ApptStatus | str, target: ApptStatus | str, role: str) -> ApptStatus:
    """
    Validate `current -> target` for `role` and return the target status.
    """
    current, target = ApptStatus(current), ApptStatus(target)
    allowed = TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidTransition(f"{current.value}->{target.value}")
    if role not in allowed:
        raise TransitionForbidden(f"{role} cannot move {current.value}->{target.value}")
    return target


def allowed_targets(current: ApptStatus | str, role: str) -> List[ApptStatus]:
    """Statuses `role` may move an appointment to from `current` (UI gating)."""
    current = ApptStatus(current)
    return [to for (frm, to), roles in TRANSITIONS.items() if frm is current and role in roles]

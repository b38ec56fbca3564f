"""Enum-based lifecycle state machine for one integration instance.

States follow the lifecycle of the remote object: an instance starts
unmanaged, passes through a transient state while a request is in flight
and settles in managed or deleted. A failed request returns the instance
to the state it started from.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class LifecycleState(str, Enum):
    """Integration instance lifecycle states."""

    UNMANAGED = "unmanaged"
    CREATING = "creating"
    MANAGED = "managed"
    UPDATING = "updating"
    DELETING = "deleting"
    DELETED = "deleted"


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed transitions: {current_state: [allowed_next_states]}
_LIFECYCLE_TRANSITIONS: dict[LifecycleState, list[LifecycleState]] = {
    LifecycleState.UNMANAGED: [LifecycleState.CREATING, LifecycleState.MANAGED],  # create / import
    LifecycleState.CREATING: [LifecycleState.MANAGED, LifecycleState.UNMANAGED],
    LifecycleState.MANAGED: [
        LifecycleState.MANAGED,  # read
        LifecycleState.UPDATING,
        LifecycleState.DELETING,
    ],
    LifecycleState.UPDATING: [LifecycleState.MANAGED],
    LifecycleState.DELETING: [LifecycleState.DELETED, LifecycleState.MANAGED],
    LifecycleState.DELETED: [],  # terminal
}

TRANSIENT_STATES = frozenset(
    {LifecycleState.CREATING, LifecycleState.UPDATING, LifecycleState.DELETING}
)


def allowed_transitions(state: LifecycleState) -> list[LifecycleState]:
    return list(_LIFECYCLE_TRANSITIONS.get(state, []))


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

@dataclass
class LifecycleTransition:
    """Record of a single state transition."""

    from_state: str
    to_state: str
    timestamp: datetime
    operation: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IntegrationLifecycle:
    """State tracker for one integration instance.

    Usage::

        lc = IntegrationLifecycle(key="warehouse")
        lc.transition(LifecycleState.CREATING, operation="create")
        lc.transition(LifecycleState.MANAGED, operation="create", metadata={"id": 17})
    """

    key: str
    current_state: LifecycleState = LifecycleState.UNMANAGED
    history: list[LifecycleTransition] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def can_transition(self, to_state: LifecycleState) -> bool:
        """Check if a transition is allowed from the current state."""
        return to_state in _LIFECYCLE_TRANSITIONS.get(self.current_state, [])

    def transition(
        self,
        to_state: LifecycleState,
        operation: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> LifecycleTransition:
        """Execute a state transition.

        Raises ValueError if the transition is not allowed.
        """
        if not self.can_transition(to_state):
            allowed_names = [s.value for s in allowed_transitions(self.current_state)]
            raise ValueError(
                f"Cannot transition {self.key} from {self.current_state.value} "
                f"to {to_state.value}. Allowed: {allowed_names}"
            )

        record = LifecycleTransition(
            from_state=self.current_state.value,
            to_state=to_state.value,
            timestamp=datetime.now(timezone.utc),
            operation=operation,
            metadata=metadata or {},
        )
        self.history.append(record)
        self.current_state = to_state
        return record

    @property
    def is_terminal(self) -> bool:
        return len(_LIFECYCLE_TRANSITIONS.get(self.current_state, [])) == 0

    @property
    def is_busy(self) -> bool:
        """True while a request for this instance is in flight."""
        return self.current_state in TRANSIENT_STATES

    @property
    def transition_count(self) -> int:
        return len(self.history)

"""Lifecycle state machine for host page attachment."""

from crosscast.schemas import LifecycleState


class LifecycleStateMachine:
    """State machine for attaching to, and detaching from, the host page.

    State flow with triggers:
    - DETACHED -> ATTACHING (PageObserver ready signal)
    - ATTACHING -> ACTIVE (host container found) | DETACHED (gave up polling, or navigation)
    - ACTIVE -> ACTIVE (user picked a stream) | RESTORING (user restore) | DETACHED (navigation)
    - RESTORING -> DETACHED (persisted session cleared)

    Detailed triggers:
    1. ATTACHING: Set by on_ready() when nothing is attached yet
    2. ACTIVE: Set once the readiness poller finds the host container
    3. RESTORING: Set by restore(); the only path that clears the persisted session
    4. DETACHED: Set by on_navigated(), after restore(), or when polling gives up
    """

    TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
        LifecycleState.DETACHED: {LifecycleState.ATTACHING},
        LifecycleState.ATTACHING: {
            LifecycleState.ACTIVE,
            LifecycleState.DETACHED,
        },
        LifecycleState.ACTIVE: {
            LifecycleState.ACTIVE,
            LifecycleState.RESTORING,
            LifecycleState.DETACHED,
        },
        LifecycleState.RESTORING: {LifecycleState.DETACHED},
    }

    @classmethod
    def can_transition(cls, current: LifecycleState, new: LifecycleState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current lifecycle state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def get_valid_transitions(cls, state: LifecycleState) -> set[LifecycleState]:
        return cls.TRANSITIONS.get(state, set())

    @classmethod
    def get_valid_sources(cls, target: LifecycleState) -> set[LifecycleState]:
        """Get all states that can transition to the target state."""
        return {state for state, targets in cls.TRANSITIONS.items() if target in targets}

"""Sync state machine for live-edge catch-up sequences."""

from crosscast.schemas import SyncState


class SyncStateMachine:
    """State machine for the live-edge sync sequence.

    State flow with triggers:
    - IDLE -> SEEKING (sync_now() issued the seek command)
    - SEEKING -> ACCELERATING (seek settle delay elapsed) | IDLE (step failed)
    - ACCELERATING -> NORMALIZING (catch-up window elapsed) | IDLE (step failed)
    - NORMALIZING -> IDLE (playback rate reset, sequence complete)
    """

    TRANSITIONS: dict[SyncState, set[SyncState]] = {
        SyncState.IDLE: {SyncState.SEEKING},
        SyncState.SEEKING: {SyncState.ACCELERATING, SyncState.IDLE},
        SyncState.ACCELERATING: {SyncState.NORMALIZING, SyncState.IDLE},
        SyncState.NORMALIZING: {SyncState.IDLE},
    }

    @classmethod
    def can_transition(cls, current: SyncState, new: SyncState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current sync state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_in_flight(cls, state: SyncState) -> bool:
        return state != SyncState.IDLE

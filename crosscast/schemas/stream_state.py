"""Common enums used across schemas."""

from enum import Enum


class SyncState(str, Enum):
    """Live-edge sync sequence states.

    State Transition Flow:

    IDLE → SEEKING → ACCELERATING → NORMALIZING → IDLE

    State Descriptions:
    - IDLE: No sync in flight. Set initially and when a sequence completes or fails.
    - SEEKING: Seek-to-live-edge command issued. Set by sync_now().
    - ACCELERATING: Playback rate raised to catch up. Set after the seek settle delay.
    - NORMALIZING: Playback rate reset to 1.0. Set after the catch-up window, then IDLE.
    """

    IDLE = "idle"
    SEEKING = "seeking"
    ACCELERATING = "accelerating"
    NORMALIZING = "normalizing"

    def __str__(self) -> str:
        return self.value


class LifecycleState(str, Enum):
    """Host page attachment states.

    State Transition Flow:

    DETACHED → ATTACHING → ACTIVE → RESTORING → DETACHED
                   ↓          ↓
               DETACHED   DETACHED (navigation)

    State Descriptions:
    - DETACHED: Nothing attached. Initial state; reached after give-up, restore or navigation.
    - ATTACHING: Polling for the host container after a page-ready signal.
    - ACTIVE: Container found; user actions and stream substitution are possible.
    - RESTORING: User asked to bring back the host player; persisted session being cleared.
    """

    DETACHED = "detached"
    ATTACHING = "attaching"
    ACTIVE = "active"
    RESTORING = "restoring"

    def __str__(self) -> str:
        return self.value


class PollState(str, Enum):
    """Readiness poller states. FOUND and GAVE_UP are terminal."""

    PENDING = "pending"
    POLLING = "polling"
    FOUND = "found"
    GAVE_UP = "gave_up"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


__all__ = ["LifecycleState", "PollState", "SyncState"]

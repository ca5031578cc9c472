"""Pydantic schemas for stream substitution state."""

from .stream import Candidate, HistoryEntry, Preferences, Session, StreamDetails, utc_now
from .stream_state import LifecycleState, PollState, SyncState

__all__ = [
    "Candidate",
    "HistoryEntry",
    "LifecycleState",
    "PollState",
    "Preferences",
    "Session",
    "StreamDetails",
    "SyncState",
    "utc_now",
]

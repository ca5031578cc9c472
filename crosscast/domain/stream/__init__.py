"""
Stream substitution domain logic.

Includes:
- session_lifecycle: Attach/restore/detach orchestration against host page events.
- session_store, history_cache: Persisted per-channel sessions and recent streams.
- search_resolver: Picking a remote stream for a host channel name.
- sync_controller: Live-edge resynchronization of the substituted player.
- platforms: Host/remote platform adapters.
"""

from .history_cache import HistoryCache, trim_history
from .platforms import PLATFORMS, TWITCH_HOST, YOUTUBE_HOST, PlatformAdapter, get_platform
from .readiness_poller import ReadinessPoller
from .search_resolver import SearchResolver
from .session_lifecycle import SessionContext, SessionLifecycle
from .session_store import SessionStore, channel_key
from .sync_controller import SyncController

__all__ = [
    "PLATFORMS",
    "TWITCH_HOST",
    "YOUTUBE_HOST",
    "HistoryCache",
    "PlatformAdapter",
    "ReadinessPoller",
    "SearchResolver",
    "SessionContext",
    "SessionLifecycle",
    "SessionStore",
    "SyncController",
    "channel_key",
    "get_platform",
    "trim_history",
]

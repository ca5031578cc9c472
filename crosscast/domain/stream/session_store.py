"""Typed persistence for sessions, history and preferences."""

from typing import Any

from loguru import logger
from pydantic import ValidationError

from crosscast.schemas import HistoryEntry, Preferences, Session, utc_now
from crosscast.utils.app_errors import PersistenceUnavailable

from ._matching import normalize
from .ports import Store

KEY_HISTORY = "history"
KEY_PREF_AUTOSYNC = "pref_autosync"
KEY_PREF_FORCE_QUALITY = "pref_force_quality"


def channel_key(channel_name: str | None) -> str:
    """Normalized host channel identifier used in persistence keys."""
    return normalize(channel_name)


def active_key(key: str) -> str:
    return f"session_active_{key}"


def last_key(key: str) -> str:
    return f"session_last_{key}"


class SessionStore:
    """Typed get/set over a key-value ``Store``.

    Store failures never propagate. When the store raises
    PersistenceUnavailable the value is served from, and written to, an
    in-process copy instead, so features keep working for the current page
    but are not persisted.
    """

    def __init__(self, store: Store):
        self.store = store
        self._local: dict[str, Any] = {}
        self.available = True

    async def _get(self, key: str) -> Any | None:
        try:
            value = await self.store.get(key)
        except PersistenceUnavailable as e:
            self._mark_unavailable(key, e)
            return self._local.get(key)
        self.available = True
        return value

    async def _set(self, key: str, value: Any | None) -> None:
        if value is None:
            self._local.pop(key, None)
        else:
            self._local[key] = value
        try:
            await self.store.set(key, value)
        except PersistenceUnavailable as e:
            self._mark_unavailable(key, e)
            return
        self.available = True

    def _mark_unavailable(self, key: str, error: PersistenceUnavailable) -> None:
        if self.available:
            logger.warning(
                "Store unavailable ({}), keeping session-only state: key={} erresid={}",
                error.errmesg,
                key,
                error.erresid,
            )
        self.available = False

    # ==================== SESSIONS ====================

    async def get_session(self, key: str) -> Session | None:
        """
        Get the active session for a channel.

        Args:
            key: Normalized channel key

        Returns:
            Session if one is active, None otherwise (including unreadable records)
        """
        raw = await self._get(active_key(key))
        if raw is None:
            return None
        try:
            return Session.model_validate(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable session for {}: {}", key, e)
            return None

    async def set_active(self, key: str, stream_id: str) -> Session:
        """Point the channel at ``stream_id``, replacing any previous session."""
        session = Session(channel_key=key, active_stream_id=stream_id, last_updated=utc_now())
        await self._set(active_key(key), session.model_dump(mode="json"))
        logger.debug("Set active stream {} for channel {}", stream_id, key)
        return session

    async def clear_active(self, key: str) -> None:
        await self._set(active_key(key), None)
        logger.debug("Cleared active stream for channel {}", key)

    async def get_last(self, key: str) -> str | None:
        value = await self._get(last_key(key))
        return value if isinstance(value, str) and value else None

    async def set_last(self, key: str, stream_id: str) -> None:
        await self._set(last_key(key), stream_id)

    # ==================== HISTORY ====================

    async def get_history(self) -> list[HistoryEntry]:
        raw = await self._get(KEY_HISTORY)
        if not isinstance(raw, list):
            return []
        entries: list[HistoryEntry] = []
        for item in raw:
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping unreadable history entry {}: {}", item, e)
        return entries

    async def set_history(self, entries: list[HistoryEntry]) -> None:
        """Replace the whole history list in a single write."""
        await self._set(KEY_HISTORY, [entry.model_dump(mode="json") for entry in entries])

    # ==================== PREFERENCES ====================

    async def load_preferences(self) -> Preferences:
        defaults = Preferences()
        auto_sync = await self._get(KEY_PREF_AUTOSYNC)
        force_quality = await self._get(KEY_PREF_FORCE_QUALITY)
        return Preferences(
            auto_sync_enabled=(
                auto_sync if isinstance(auto_sync, bool) else defaults.auto_sync_enabled
            ),
            force_highest_quality=(
                force_quality
                if isinstance(force_quality, bool)
                else defaults.force_highest_quality
            ),
        )

    async def set_auto_sync(self, enabled: bool) -> None:
        await self._set(KEY_PREF_AUTOSYNC, enabled)

    async def set_force_quality(self, enabled: bool) -> None:
        await self._set(KEY_PREF_FORCE_QUALITY, enabled)

"""Bounded, pinnable history of watched substitutions."""

import asyncio
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from crosscast.app_config import get_app_environ_config
from crosscast.schemas import HistoryEntry, utc_now

from .session_store import SessionStore


def trim_history(entries: list[HistoryEntry], limit: int) -> list[HistoryEntry]:
    """
    Apply the retention policy.

    All pinned entries are kept, plus the ``limit`` most recent unpinned ones.
    Each partition is ordered by timestamp, newest first; pinned entries come
    first. Sorting is stable, so entries with equal timestamps keep their
    current relative order.
    """
    pinned = sorted((e for e in entries if e.pinned), key=lambda e: e.timestamp, reverse=True)
    unpinned = sorted(
        (e for e in entries if not e.pinned), key=lambda e: e.timestamp, reverse=True
    )
    return pinned + unpinned[:limit]


class HistoryCache:
    """In-memory history list persisted through SessionStore after every mutation."""

    def __init__(
        self,
        store: SessionStore,
        limit: int | None = None,
        clear_keeps_pinned: bool | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        app_config = get_app_environ_config()
        self.store = store
        self.limit = limit if limit is not None else app_config.HISTORY_LIMIT
        self.clear_keeps_pinned = (
            clear_keeps_pinned
            if clear_keeps_pinned is not None
            else app_config.HISTORY_CLEAR_KEEPS_PINNED
        )
        self._clock = clock
        self._entries: list[HistoryEntry] = []
        self._loaded = False
        self._load_lock = asyncio.Lock()

    async def load(self) -> list[HistoryEntry]:
        """Read the persisted list once; later calls return the cached list.

        Concurrent callers wait for the same read, so a mutation issued while
        the first load is in flight applies on top of the loaded list.
        """
        if not self._loaded:
            async with self._load_lock:
                if not self._loaded:
                    entries = await self.store.get_history()
                    self._entries = trim_history(entries, self.limit)
                    self._loaded = True
                    logger.debug("Loaded {} history entries", len(self._entries))
        return self.list()

    def list(self) -> list[HistoryEntry]:
        """Pinned entries first, then most recent; a fresh list on every call."""
        return [entry.model_copy() for entry in self._entries]

    async def add(
        self,
        stream_id: str,
        title: str = "",
        channel_name: str = "",
    ) -> HistoryEntry:
        """
        Record a watched stream.

        An existing entry keeps its pinned flag and moves to the front with a
        fresh timestamp; its title and channel are refreshed when given.

        Returns:
            The stored entry
        """
        await self.load()
        existing = self._find(stream_id)
        if existing is not None:
            self._entries.remove(existing)
            entry = existing.model_copy(
                update={
                    "title": title or existing.title,
                    "channel_name": channel_name or existing.channel_name,
                    "timestamp": self._clock(),
                }
            )
        else:
            entry = HistoryEntry(
                stream_id=stream_id,
                title=title,
                channel_name=channel_name,
                timestamp=self._clock(),
                pinned=False,
            )
        self._entries.insert(0, entry)
        await self._commit()
        return entry.model_copy()

    async def toggle_pin(self, stream_id: str) -> HistoryEntry | None:
        """
        Flip the pinned flag of an entry.

        Unpinning can push the entry past the retention limit, in which case it
        is dropped from the history.

        Returns:
            The updated entry, or None if the stream is unknown
        """
        await self.load()
        existing = self._find(stream_id)
        if existing is None:
            logger.debug("toggle_pin: unknown stream {}", stream_id)
            return None
        index = self._entries.index(existing)
        updated = existing.model_copy(update={"pinned": not existing.pinned})
        self._entries[index] = updated
        await self._commit()
        return updated.model_copy()

    async def clear(self, keep_pinned: bool | None = None) -> None:
        """Empty the history; pinned entries survive only when configured or requested."""
        await self.load()
        if keep_pinned is None:
            keep_pinned = self.clear_keeps_pinned
        self._entries = [e for e in self._entries if e.pinned] if keep_pinned else []
        await self._commit()

    def _find(self, stream_id: str) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.stream_id == stream_id:
                return entry
        return None

    async def _commit(self) -> None:
        self._entries = trim_history(self._entries, self.limit)
        self._loaded = True
        await self.store.set_history(self._entries)

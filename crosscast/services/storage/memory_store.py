"""In-process key-value store."""

import copy
from typing import Any

from loguru import logger

from crosscast.utils.app_errors import PersistenceUnavailable


class MemoryStore:
    """Dict-backed ``Store``.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store. Once closed, every call raises
    PersistenceUnavailable, like a storage context that was torn down.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise PersistenceUnavailable("Memory store is closed")

    async def get(self, key: str) -> Any | None:
        self._ensure_open()
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any | None) -> None:
        self._ensure_open()
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = copy.deepcopy(value)

    def close(self) -> None:
        self.closed = True
        logger.debug("Memory store closed with {} key(s)", len(self._data))

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

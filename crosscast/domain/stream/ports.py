"""Interfaces of the collaborators the stream domain talks to."""

from collections.abc import Sequence
from typing import Any, Protocol

from crosscast.schemas import Candidate, HistoryEntry, StreamDetails


class Store(Protocol):
    """Asynchronous key-value persistence.

    Implementations raise PersistenceUnavailable when the backing context is gone.
    Setting a key to None removes it.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any | None) -> None: ...


class SearchProvider(Protocol):
    async def search(self, query: str) -> list[Candidate]: ...


class MetadataProvider(Protocol):
    async def details(self, stream_id: str) -> StreamDetails | None: ...


class PlayerControl(Protocol):
    """Fire-and-forget command channel to an embedded player."""

    def command(self, name: str, *args: Any) -> None: ...


class PageObserver(Protocol):
    """Read access to the host page.

    ``ready`` and ``navigated`` events are delivered by calling
    SessionLifecycle.on_ready / SessionLifecycle.on_navigated.
    """

    def find_container(self, selectors: Sequence[str]) -> bool: ...

    def read_channel_name(self, selectors: Sequence[str]) -> str | None: ...


class SessionView(Protocol):
    """Presentation surface owned by the host page integration."""

    def render_history(self, entries: list[HistoryEntry]) -> None: ...

    def show_status(self, message: str | None) -> None: ...

    def mount_player(self, embed_url: str) -> PlayerControl | None: ...

    def unmount_player(self) -> None: ...

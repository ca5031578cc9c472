"""Attach, restore and detach stream substitutions on a host page."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from crosscast.schemas import Candidate, HistoryEntry, LifecycleState, PollState, Preferences
from crosscast.shared.scheduler import LoopScheduler, Scheduler
from crosscast.utils.app_errors import InvalidTransitionError, NotFoundError, SearchError

from .history_cache import HistoryCache
from .lifecycle_state_machine import LifecycleStateMachine
from .platforms import PlatformAdapter
from .ports import MetadataProvider, PageObserver, PlayerControl, SearchProvider, SessionView, Store
from .readiness_poller import ReadinessPoller
from .search_resolver import SearchResolver
from .session_store import SessionStore, channel_key
from .sync_controller import SyncController


@dataclass
class SessionContext:
    """Per-page state. Replaced wholesale on every navigation.

    Asynchronous work captures the context it started under and compares it
    with the current one before applying results.
    """

    generation: int
    channel_name: str | None = None
    channel_key: str = ""
    active_stream_id: str | None = None
    player: PlayerControl | None = None


class SessionLifecycle:
    """Orchestrates SessionStore, HistoryCache, SearchResolver and SyncController
    against host page events.

    Navigation is non-destructive: the persisted session of the channel being
    left survives, so coming back resumes it. An explicit restore() is the only
    path that clears the persisted session.
    """

    def __init__(
        self,
        adapter: PlatformAdapter,
        page: PageObserver,
        view: SessionView,
        store: Store,
        search_provider: SearchProvider,
        metadata_provider: MetadataProvider | None = None,
        scheduler: Scheduler | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        history: HistoryCache | None = None,
        resolver: SearchResolver | None = None,
    ):
        self.adapter = adapter
        self.page = page
        self.view = view
        self.metadata = metadata_provider
        self.sessions = SessionStore(store)
        self.history = history or HistoryCache(self.sessions)
        self.resolver = resolver or SearchResolver(search_provider)
        self.sync = SyncController(
            player=lambda: self._context.player,
            scheduler=scheduler or LoopScheduler(),
            on_status=self._show_status,
            is_active=lambda: self._context.active_stream_id is not None,
        )

        self.state = LifecycleState.DETACHED
        self.preferences: Preferences | None = None
        self._generation = 0
        self._context = SessionContext(generation=0)
        self._poller: ReadinessPoller | None = None
        self._sleep = sleep

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def active_stream_id(self) -> str | None:
        return self._context.active_stream_id

    def _is_current(self, ctx: SessionContext) -> bool:
        return ctx is self._context

    def _transition(self, new_state: LifecycleState) -> None:
        if not LifecycleStateMachine.can_transition(self.state, new_state):
            raise InvalidTransitionError(
                f"Invalid lifecycle transition: {self.state} -> {new_state}"
            )
        if new_state != self.state:
            logger.debug("Lifecycle {} -> {}", self.state, new_state)
        self.state = new_state

    def _require_active(self, action: str) -> SessionContext:
        if self.state != LifecycleState.ACTIVE:
            raise InvalidTransitionError(f"Cannot {action} while {self.state}")
        return self._context

    def _show_status(self, message: str | None) -> None:
        self.view.show_status(message)

    def _prefs(self) -> Preferences:
        return self.preferences or Preferences()

    # ==================== PAGE EVENTS ====================

    async def on_ready(self) -> bool:
        """
        Handle the host page ready signal.

        Polls for the host container, then activates: loads preferences and
        history, and resumes the channel's persisted session if there is one.

        Returns:
            True if the lifecycle ended up ACTIVE for the context it started in
        """
        if self.state != LifecycleState.DETACHED:
            logger.debug("Ready signal ignored in state {}", self.state)
            return False

        self._transition(LifecycleState.ATTACHING)
        ctx = self._context
        poller = ReadinessPoller(
            lambda: self.page.find_container(self.adapter.container_selectors),
            sleep=self._sleep,
        )
        self._poller = poller
        result = await poller.run()

        if not self._is_current(ctx):
            logger.debug("Readiness result dropped after navigation")
            return False
        self._poller = None
        if result != PollState.FOUND:
            self._transition(LifecycleState.DETACHED)
            return False

        await self._activate(ctx)
        return self._is_current(ctx) and self.state == LifecycleState.ACTIVE

    def on_navigated(self) -> None:
        """
        Handle an SPA route change.

        Stops syncing, drops the player and every pending result of the old
        page, but keeps persisted sessions.
        """
        old = self._context
        self._generation += 1
        self._context = SessionContext(generation=self._generation)

        if self._poller is not None:
            self._poller.cancel()
            self._poller = None
        self.sync.stop_auto_sync()
        if old.player is not None:
            self.view.unmount_player()
        if self.state != LifecycleState.DETACHED:
            self._transition(LifecycleState.DETACHED)
        logger.info("Navigated away from channel '{}'", old.channel_key)

    async def _activate(self, ctx: SessionContext) -> None:
        ctx.channel_name = self.page.read_channel_name(self.adapter.channel_selectors)
        ctx.channel_key = channel_key(ctx.channel_name)

        # Preferences are global and loaded once per lifecycle
        if self.preferences is None:
            preferences = await self.sessions.load_preferences()
            if self.preferences is None:
                self.preferences = preferences
        entries = await self.history.load()
        if not self._is_current(ctx):
            return
        self._transition(LifecycleState.ACTIVE)
        self.view.render_history(entries)

        if not ctx.channel_key:
            logger.info("Host channel name not found, waiting for manual input")
            return

        session = await self.sessions.get_session(ctx.channel_key)
        if not self._is_current(ctx):
            logger.debug("Dropping stale session lookup for {}", ctx.channel_key)
            return
        if session is None or ctx.active_stream_id is not None:
            return

        logger.info("Resuming stream {} for channel {}", session.active_stream_id, ctx.channel_key)
        await self._attach(ctx, session.active_stream_id, record=False)

    # ==================== USER ACTIONS ====================

    async def submit_url(self, url: str) -> str | None:
        """
        Substitute the stream addressed by a pasted URL or bare id.

        Returns:
            The stream id, or None if the input was not recognised or went stale
        """
        ctx = self._require_active("submit a URL")
        stream_id = self.adapter.extract_stream_id(url)
        if stream_id is None:
            self._show_status(f"Not a valid {self.adapter.remote} URL")
            return None

        title, channel_name = "", ""
        if self.metadata is not None:
            try:
                details = await self.metadata.details(stream_id)
            except Exception as e:
                logger.warning("Metadata lookup failed for {}: {}", stream_id, e)
                details = None
            if details is not None:
                title, channel_name = details.title, details.channel_name
        if not self._is_current(ctx):
            logger.info("Discarding URL submission for {} after navigation", stream_id)
            return None

        await self._attach(ctx, stream_id, title=title, channel_name=channel_name)
        return stream_id

    async def search(self) -> Candidate | None:
        """
        Find and substitute the remote stream for the current host channel.

        Search failures and empty results are reported as status messages.

        Returns:
            The attached candidate, or None
        """
        ctx = self._require_active("search")
        if not ctx.channel_name:
            self._show_status("Could not detect the channel name. Enter a URL instead.")
            return None

        self._show_status(f"Searching {self.adapter.remote} for {ctx.channel_name}...")
        try:
            candidate = await self.resolver.search(ctx.channel_name)
        except (SearchError, NotFoundError) as e:
            if self._is_current(ctx):
                self._show_status(e.errmesg)
            return None

        if not self._is_current(ctx):
            logger.info(
                "Discarding search result {} for '{}' after navigation",
                candidate.stream_id,
                ctx.channel_name,
            )
            return None

        await self._attach(
            ctx, candidate.stream_id, title=candidate.title, channel_name=candidate.channel_name
        )
        if candidate.approximate and self._is_current(ctx):
            self._show_status(f"No exact match, showing best guess: {candidate.channel_name}")
        return candidate

    async def select_candidate(self, candidate: Candidate) -> None:
        ctx = self._require_active("select a search result")
        await self._attach(
            ctx, candidate.stream_id, title=candidate.title, channel_name=candidate.channel_name
        )

    async def select_history(self, stream_id: str) -> None:
        ctx = self._require_active("select a history item")
        entry = next((e for e in self.history.list() if e.stream_id == stream_id), None)
        await self._attach(
            ctx,
            stream_id,
            title=entry.title if entry else "",
            channel_name=entry.channel_name if entry else "",
        )

    async def restore(self) -> None:
        """
        Bring back the host player and forget the channel's session.

        A later visit to the same channel will not resume automatically.
        """
        ctx = self._require_active("restore")
        self._transition(LifecycleState.RESTORING)
        self.sync.stop_auto_sync()
        if ctx.player is not None:
            self.view.unmount_player()
        ctx.player = None
        ctx.active_stream_id = None

        if ctx.channel_key:
            await self.sessions.clear_active(ctx.channel_key)
        if self.state == LifecycleState.RESTORING:
            self._transition(LifecycleState.DETACHED)
        logger.info("Restored host player for channel '{}'", ctx.channel_key)

    async def _attach(
        self,
        ctx: SessionContext,
        stream_id: str,
        title: str = "",
        channel_name: str = "",
        record: bool = True,
    ) -> None:
        if not self._is_current(ctx) or self.state != LifecycleState.ACTIVE:
            return

        if ctx.player is not None:
            self.view.unmount_player()
        embed_url = self.adapter.embed_url(stream_id, self._prefs().force_highest_quality)
        ctx.player = self.view.mount_player(embed_url)
        ctx.active_stream_id = stream_id
        self._transition(LifecycleState.ACTIVE)
        logger.info(
            "Attached {} stream {} on channel '{}'", self.adapter.remote, stream_id, ctx.channel_key
        )

        if record:
            await self.history.add(stream_id, title=title, channel_name=channel_name)
            if ctx.channel_key:
                await self.sessions.set_active(ctx.channel_key, stream_id)
                await self.sessions.set_last(ctx.channel_key, stream_id)
            if not self._is_current(ctx):
                return
            self.view.render_history(self.history.list())

        if self._prefs().auto_sync_enabled:
            self.sync.start_auto_sync()

    # ==================== PREFERENCES & PASSTHROUGH ====================

    async def set_auto_sync(self, enabled: bool) -> None:
        """Persist the auto-sync preference and start or stop the timer accordingly."""
        self.preferences = self._prefs().model_copy(update={"auto_sync_enabled": enabled})
        await self.sessions.set_auto_sync(enabled)
        if not enabled:
            self.sync.stop_auto_sync()
        elif self.state == LifecycleState.ACTIVE and self._context.active_stream_id:
            self.sync.start_auto_sync()

    async def set_force_quality(self, enabled: bool) -> None:
        """Persist the quality preference; it applies to the next mounted player."""
        self.preferences = self._prefs().model_copy(update={"force_highest_quality": enabled})
        await self.sessions.set_force_quality(enabled)

    def sync_now(self) -> bool:
        return self.sync.sync_now()

    async def toggle_pin(self, stream_id: str) -> HistoryEntry | None:
        entry = await self.history.toggle_pin(stream_id)
        self.view.render_history(self.history.list())
        return entry

    async def clear_history(self, keep_pinned: bool | None = None) -> None:
        await self.history.clear(keep_pinned=keep_pinned)
        self.view.render_history(self.history.list())

    async def suggestion(self) -> str | None:
        """
        The stream to offer when nothing is active.

        That is the stream last used on this channel. Without one, platforms
        whose remote streams are named after channels guess the host channel's
        own name.
        """
        ctx = self._context
        if not ctx.channel_key or ctx.active_stream_id is not None:
            return None
        stream_id = await self.sessions.get_last(ctx.channel_key)
        if not self._is_current(ctx):
            return None
        if stream_id is None and self.adapter.channel_named_streams:
            return self.adapter.extract_stream_id(ctx.channel_key)
        return stream_id

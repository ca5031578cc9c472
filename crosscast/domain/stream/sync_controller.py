"""Live-edge resynchronization for the substituted player.

Embedded players drift behind live while buffering. A sync sequence jumps
back to the live edge and briefly plays faster so the jump does not leave the
player stalled, then restores normal speed:

    t=0        seekTo(LIVE_EDGE_OFFSET)          SEEKING
    t=settle   setPlaybackRate(catchup_rate)     ACCELERATING
    t=+catchup setPlaybackRate(1.0)              NORMALIZING -> IDLE
    t=+grace   clear status (if no newer sync)

Commands are fire-and-forget: the player never acknowledges them. Steps that
are already scheduled run even if auto-sync is stopped in the meantime.
"""

from collections.abc import Callable

from loguru import logger

from crosscast.app_config import get_app_environ_config
from crosscast.schemas import SyncState
from crosscast.shared.scheduler import Scheduler, TimerHandle
from crosscast.shared.utils import format_error
from crosscast.utils.app_errors import InvalidTransitionError, PlayerNotFoundError

from .ports import PlayerControl
from .sync_state_machine import SyncStateMachine

# Players clamp out-of-range seeks to the furthest seekable position
LIVE_EDGE_OFFSET = 1_000_000_000

STATUS_SYNCING = "Syncing to live edge..."
STATUS_SYNCED = "Synced to live edge"
STATUS_FAILED = "Sync failed"


class SyncController:
    """Single-flight live-edge sync with an optional repeating timer."""

    def __init__(
        self,
        player: Callable[[], PlayerControl | None],
        scheduler: Scheduler,
        on_status: Callable[[str | None], None] | None = None,
        is_active: Callable[[], bool] | None = None,
        *,
        settle_seconds: float | None = None,
        catchup_seconds: float | None = None,
        grace_seconds: float | None = None,
        catchup_rate: float | None = None,
    ):
        """
        Args:
            player: Returns the current player handle, or None when there is none
            scheduler: Timer source for the staged commands and the auto-sync loop
            on_status: Receives transient status messages; None clears the status
            is_active: Whether a stream is currently substituted (gates auto-sync ticks)
        """
        app_config = get_app_environ_config()
        self._player = player
        self._scheduler = scheduler
        self._on_status = on_status or (lambda message: None)
        self._is_active = is_active or (lambda: True)

        self.settle_seconds = (
            settle_seconds if settle_seconds is not None else app_config.SYNC_SEEK_SETTLE_SECONDS
        )
        self.catchup_seconds = (
            catchup_seconds if catchup_seconds is not None else app_config.SYNC_CATCHUP_SECONDS
        )
        self.grace_seconds = (
            grace_seconds if grace_seconds is not None else app_config.SYNC_STATUS_GRACE_SECONDS
        )
        self.catchup_rate = (
            catchup_rate if catchup_rate is not None else app_config.SYNC_CATCHUP_RATE
        )

        self._state = SyncState.IDLE
        self._is_syncing = False
        self._generation = 0
        self._timer: TimerHandle | None = None
        self._interval: float | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    @property
    def auto_sync_running(self) -> bool:
        return self._timer is not None

    # ==================== SYNC SEQUENCE ====================

    def sync_now(self) -> bool:
        """
        Start a live-edge sync sequence.

        Returns:
            True if a sequence was started, False if one is already in flight,
            there is no player, or the first command failed
        """
        if self._is_syncing:
            logger.debug("Sync already in flight (state={}), ignoring", self._state)
            return False

        try:
            player = self._require_player()
        except PlayerNotFoundError as e:
            logger.warning("Sync aborted: {} erresid={}", e.errmesg, e.erresid)
            self._on_status(e.errmesg)
            return False

        self._generation += 1
        generation = self._generation
        self._is_syncing = True
        try:
            self._transition(SyncState.SEEKING)
            player.command("seekTo", LIVE_EDGE_OFFSET, True)
            self._on_status(STATUS_SYNCING)
            self._scheduler.call_later(self.settle_seconds, lambda: self._accelerate(generation))
        except Exception as e:
            self._fail(e)
            return False

        logger.debug("Sync #{} started", generation)
        return True

    def _require_player(self) -> PlayerControl:
        player = self._player()
        if player is None:
            raise PlayerNotFoundError("No player to sync")
        return player

    def _accelerate(self, generation: int) -> None:
        try:
            self._transition(SyncState.ACCELERATING)
            player = self._player()
            if player is None:
                logger.info("Player gone during sync #{}, skipping catch-up rate", generation)
            else:
                player.command("setPlaybackRate", self.catchup_rate)
            self._scheduler.call_later(self.catchup_seconds, lambda: self._normalize(generation))
        except Exception as e:
            self._fail(e)

    def _normalize(self, generation: int) -> None:
        try:
            self._transition(SyncState.NORMALIZING)
            player = self._player()
            if player is not None:
                player.command("setPlaybackRate", 1.0)
        except Exception as e:
            self._fail(e)
            return

        self._state = SyncState.IDLE
        self._is_syncing = False
        logger.debug("Sync #{} complete", generation)
        try:
            self._on_status(STATUS_SYNCED)
            self._scheduler.call_later(self.grace_seconds, lambda: self._clear_status(generation))
        except Exception as e:
            logger.error("Failed to report sync completion: {}", format_error(e))

    def _clear_status(self, generation: int) -> None:
        # A newer sync owns the status line now
        if generation != self._generation or self._is_syncing:
            return
        self._on_status(None)

    def _transition(self, new_state: SyncState) -> None:
        if not SyncStateMachine.can_transition(self._state, new_state):
            raise InvalidTransitionError(f"Invalid sync transition: {self._state} -> {new_state}")
        self._state = new_state

    def _fail(self, error: Exception) -> None:
        logger.error("Sync failed in state {}: {}", self._state, format_error(error))
        self._state = SyncState.IDLE
        self._is_syncing = False
        generation = self._generation
        try:
            self._on_status(STATUS_FAILED)
            self._scheduler.call_later(self.grace_seconds, lambda: self._clear_status(generation))
        except Exception as e:
            logger.error("Failed to report sync failure: {}", e)

    # ==================== AUTO SYNC ====================

    def start_auto_sync(self, interval: float | None = None) -> bool:
        """
        Start the repeating sync timer.

        Args:
            interval: Seconds between ticks (defaults to SYNC_INTERVAL_SECONDS)

        Returns:
            True if the timer was started, False if it was already running
        """
        if self._timer is not None:
            return False
        self._interval = interval or get_app_environ_config().SYNC_INTERVAL_SECONDS
        self._timer = self._scheduler.call_later(self._interval, self._tick)
        logger.info("Auto-sync started every {}s", self._interval)
        return True

    def stop_auto_sync(self) -> bool:
        """Cancel the repeating timer. In-flight sync steps still run."""
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        logger.info("Auto-sync stopped")
        return True

    def _tick(self) -> None:
        # Re-arm first so stop_auto_sync() during the tick cancels the next one
        self._timer = self._scheduler.call_later(self._interval, self._tick)
        if not self._is_active() or self._is_syncing:
            return
        self.sync_now()

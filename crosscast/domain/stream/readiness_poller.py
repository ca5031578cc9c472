"""Bounded polling for host page readiness."""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from crosscast.app_config import get_app_environ_config
from crosscast.schemas import PollState


class ReadinessPoller:
    """Finite-state poller with a fixed interval and a bounded number of attempts.

    PENDING -> POLLING -> FOUND | GAVE_UP | CANCELLED

    The poller is single use. Give-up is a terminal state rather than a timer
    that silently stops firing.
    """

    TERMINAL_STATES = {PollState.FOUND, PollState.GAVE_UP, PollState.CANCELLED}

    def __init__(
        self,
        check: Callable[[], bool],
        *,
        max_attempts: int | None = None,
        interval: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        app_config = get_app_environ_config()
        self.check = check
        self.max_attempts = (
            max_attempts if max_attempts is not None else app_config.READY_MAX_ATTEMPTS
        )
        self.interval = interval if interval is not None else app_config.READY_POLL_INTERVAL_SECONDS
        self.attempts = 0
        self.state = PollState.PENDING
        self._sleep = sleep

    @property
    def done(self) -> bool:
        return self.state in self.TERMINAL_STATES

    def cancel(self) -> None:
        """Stop polling at the next suspension point."""
        if not self.done:
            self.state = PollState.CANCELLED

    async def run(self) -> PollState:
        """
        Poll until the check passes, attempts run out, or the poller is cancelled.

        Returns:
            The terminal state
        """
        if self.state != PollState.PENDING:
            return self.state

        self.state = PollState.POLLING
        while self.attempts < self.max_attempts:
            self.attempts += 1
            if self.check():
                self.state = PollState.FOUND
                logger.debug("Host container found after {} attempt(s)", self.attempts)
                return self.state
            if self.attempts >= self.max_attempts:
                break
            await self._sleep(self.interval)
            if self.state == PollState.CANCELLED:
                logger.debug("Readiness polling cancelled after {} attempt(s)", self.attempts)
                return self.state

        self.state = PollState.GAVE_UP
        logger.warning(
            "Host container not found after {} attempts ({}s interval), giving up",
            self.attempts,
            self.interval,
        )
        return self.state

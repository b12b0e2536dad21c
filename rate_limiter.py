"""
Process-wide dispatch rate limiter.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from exceptions import InvariantViolation
from logging_utils import log_event

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforces a minimum interval between the starts of any two batch dispatches.

    There is a single budget for the whole process, shared by every
    ingestion and every priority.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch_start: Optional[float] = None

    @property
    def last_dispatch_start(self) -> Optional[float]:
        return self._last_dispatch_start

    def delay_until_ready(self) -> float:
        """Seconds left before the next dispatch may start; 0 when it may start now."""
        if self._last_dispatch_start is None:
            return 0.0
        elapsed = self._clock() - self._last_dispatch_start
        return max(0.0, self.min_interval - elapsed)

    async def wait(self) -> None:
        """
        Suspend until a dispatch is allowed. Does not claim the slot.
        """

        delay = self.delay_until_ready()
        if delay > 0:
            log_event(logger, logging.DEBUG, "rate_limit_wait", seconds=round(delay, 3))
        # Timers may fire a hair early, so re-check after each sleep.
        while delay > 0:
            await self._sleep(delay)
            delay = self.delay_until_ready()

    def record_dispatch(self) -> float:
        """
        Claim the slot for a dispatch starting now and return its start time.
        """

        delay = self.delay_until_ready()
        if delay > 0:
            raise InvariantViolation(f"dispatch attempted {delay:.3f}s before the rate limit allows")
        now = self._clock()
        self._last_dispatch_start = now
        return now

    async def acquire(self) -> float:
        """
        Wait until a dispatch is allowed, then record and return its start time.

        Convenience for callers that commit to a dispatch before waiting. The
        batch worker instead calls ``wait`` and ``record_dispatch`` separately
        so it can choose its batch after the wait.
        """

        await self.wait()
        return self.record_dispatch()

    def reset(self) -> None:
        self._last_dispatch_start = None

"""Request throttle shared by all reasoning calls in a run."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

SleepFn = Callable[[float], Awaitable[None]]


class RequestThrottle:
    """Pace reasoning calls under the provider's steady-state rate limit.

    A fixed cooldown follows every successful call. Rate-limit signals wait
    for the provider-suggested delay, or ``default_wait_seconds`` when the
    provider gives none.
    """

    def __init__(
        self,
        cooldown_seconds: float = 2.0,
        default_wait_seconds: float = 5.0,
        sleep: SleepFn | None = None,
    ) -> None:
        self.cooldown_seconds = max(0.0, cooldown_seconds)
        self.default_wait_seconds = max(0.0, default_wait_seconds)
        self._sleep = sleep or asyncio.sleep
        self.total_waited = 0.0

    async def cooldown(self) -> None:
        """Pause after a successful call."""

        await self._wait(self.cooldown_seconds)

    async def backoff(self, retry_after_seconds: float | None = None) -> float:
        """Pause after a rate-limit signal.

        Args:
            retry_after_seconds: Provider-suggested delay, if any.

        Returns:
            Seconds actually waited.
        """

        delay = self.default_wait_seconds if retry_after_seconds is None else retry_after_seconds
        delay = max(0.0, delay)
        await self._wait(delay)
        return delay

    async def _wait(self, seconds: float) -> None:
        if seconds <= 0:
            return
        self.total_waited += seconds
        await self._sleep(seconds)

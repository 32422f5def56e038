"""Pacing for sequential API calls.

Enrichment issues one request at a time and keeps a minimum gap between the
start of consecutive requests so bursts of cache misses stay well inside the
GitHub rate limits.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import time

Sleep = cabc.Callable[[float], cabc.Awaitable[None]]
Clock = cabc.Callable[[], float]


class RequestPacer:
    """Enforce a minimum interval between successive :meth:`wait` returns.

    The first call returns immediately. Later calls sleep for whatever is
    left of ``min_interval_s`` since the previous call returned, yielding to
    the event loop while they wait.

    ``sleep`` and ``clock`` are injectable so tests can observe the delays
    without waiting for them.
    """

    def __init__(
        self,
        min_interval_s: float,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        """Create a pacer with the given minimum interval in seconds."""
        if min_interval_s < 0:
            msg = f"min_interval_s must be non-negative, got: {min_interval_s}"
            raise ValueError(msg)
        self._interval = min_interval_s
        self._sleep = sleep
        self._clock = clock
        self._last: float | None = None

    @property
    def min_interval_s(self) -> float:
        """Return the configured minimum interval."""
        return self._interval

    async def wait(self) -> None:
        """Wait until the next request may start."""
        if self._last is not None and self._interval > 0:
            remaining = self._interval - (self._clock() - self._last)
            if remaining > 0:
                await self._sleep(remaining)
        self._last = self._clock()

"""
Outbound rate limiting for the Amadeus API.

Amadeus quotas differ per environment:
  - Test:       10 tx/sec, so no more than one request every 100ms
  - Production: 40 tx/sec, enforced here as a reservoir of 40 tokens reset every second

Both profiles cap concurrency at 50 in-flight requests. One limiter instance is
shared by every upstream call site for the lifetime of the process.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Admits scheduled coroutines in FIFO order, subject to a concurrency cap,
    an optional minimum spacing between dispatches and an optional token reservoir.

    Usage:
        limiter = RateLimiter(max_concurrent=50, min_time=0.1)
        result = await limiter.schedule(client.get, url)
    """

    def __init__(
        self,
        max_concurrent: int = 50,
        min_time: float = 0.0,
        reservoir: Optional[int] = None,
        reservoir_refresh_amount: Optional[int] = None,
        reservoir_refresh_interval: Optional[float] = None,
    ):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if reservoir is not None and not reservoir_refresh_interval:
            raise ValueError("reservoir requires a reservoir_refresh_interval")

        self.max_concurrent = max_concurrent
        self.min_time = min_time
        self.reservoir_refresh_amount = reservoir_refresh_amount if reservoir_refresh_amount is not None else reservoir
        self.reservoir_refresh_interval = reservoir_refresh_interval

        self._slots = asyncio.Semaphore(max_concurrent)
        # Held by the task at the head of the queue; asyncio.Lock wakes waiters in FIFO order
        self._admission = asyncio.Lock()
        self._uses_reservoir = reservoir is not None
        self._reservoir = reservoir
        self._reservoir_refreshed_at: Optional[float] = None
        self._last_dispatch: Optional[float] = None
        self._running = 0
        self._queued = 0

    @property
    def running(self) -> int:
        return self._running

    @property
    def queued(self) -> int:
        return self._queued

    async def schedule(self, task: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Wait for capacity, then run task(*args, **kwargs) and return its result."""
        self._queued += 1
        try:
            async with self._admission:
                await self._slots.acquire()
                try:
                    await self._wait_for_interval()
                    await self._take_token()
                except BaseException:
                    self._slots.release()
                    raise
                self._last_dispatch = self._now()
                self._running += 1
        finally:
            self._queued -= 1

        try:
            return await task(*args, **kwargs)
        finally:
            self._running -= 1
            self._slots.release()

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    async def _wait_for_interval(self) -> None:
        if not self.min_time or self._last_dispatch is None:
            return
        delay = self._last_dispatch + self.min_time - self._now()
        if delay > 0:
            await asyncio.sleep(delay)

    def _refresh_reservoir(self) -> None:
        now = self._now()
        if self._reservoir_refreshed_at is None:
            self._reservoir_refreshed_at = now
            return
        elapsed = now - self._reservoir_refreshed_at
        if elapsed >= self.reservoir_refresh_interval:
            # Stay aligned to the refresh ticks rather than to the moment we noticed them
            ticks = int(elapsed // self.reservoir_refresh_interval)
            self._reservoir_refreshed_at += ticks * self.reservoir_refresh_interval
            self._reservoir = self.reservoir_refresh_amount

    async def _take_token(self) -> None:
        if not self._uses_reservoir:
            return
        self._refresh_reservoir()
        while self._reservoir <= 0:
            delay = self._reservoir_refreshed_at + self.reservoir_refresh_interval - self._now()
            logger.debug(f"Reservoir empty, {self._queued} queued. Waiting {delay:.3f}s for refresh.")
            if delay > 0:
                await asyncio.sleep(delay)
            self._refresh_reservoir()
        self._reservoir -= 1


def build_rate_limiter(env: str) -> RateLimiter:
    """Pick the limiter profile for the configured Amadeus environment."""
    if env == "test":
        limiter = RateLimiter(max_concurrent=50, min_time=0.1)
    else:
        limiter = RateLimiter(
            max_concurrent=50,
            reservoir=40,
            reservoir_refresh_amount=40,
            reservoir_refresh_interval=1.0,
        )
    logger.info(f"Rate limiter configured for '{env}' environment")
    return limiter

"""
Centralized Rate Limiter for External API Calls.

Hey future me - this is THE rate limiter for YouTube and Discogs! One instance per
provider, shared by everything in the process.

WHY A QUEUE AND NOT A TOKEN BUCKET?
- YouTube charges 100 quota units per search and gives us 10,000 per day. Burning
  the daily budget is way worse than being slow, so we serialize EVERYTHING.
- Every call goes through enqueue(), one drain task dispatches them strictly in
  FIFO order, one at a time, awaiting each HTTP round trip before the next.
- No intra-provider parallelism at all. That's what keeps quota usage predictable.

BEFORE EACH DISPATCH:
1. Burst window elapsed? → reset the in-window counter
2. In-window counter at the ceiling? → sleep until the window resets
3. Daily budget exhausted? → STOP dispatching. Queued tasks stay pending until the
   UTC day rolls over. We never raise for quota reasons, we block. Sending a request
   we know will 429 is pointless.
After each dispatch a small fixed delay is added, providers have sub-window limits
they don't document.

USAGE:
    limiter = get_youtube_limiter()
    data = await limiter.enqueue(lambda: client.get("/search", params=params))

    status = limiter.get_status()  # used / max / percent_used / queue_length

Counters live in an IQuotaStore (in-memory by default), the limiter is the only writer.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from trackenhancer.config.settings import DiscogsSettings, YouTubeSettings, get_settings
from trackenhancer.domain.dtos import QuotaState, QuotaStatus
from trackenhancer.domain.ports import IQuotaStore
from trackenhancer.domain.value_objects.provider_types import Provider

logger = logging.getLogger(__name__)

T = TypeVar("T")

SECONDS_PER_DAY = 86400


class InMemoryQuotaStore(IQuotaStore):
    """Process-local quota store. Fine for a single instance, nothing else."""

    def __init__(self) -> None:
        self._states: dict[str, QuotaState] = {}

    def load(self, provider: str) -> QuotaState:
        state = self._states.get(provider)
        if state is None:
            state = QuotaState()
            self._states[provider] = state
        return state

    def save(self, provider: str, state: QuotaState) -> None:
        self._states[provider] = state


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter.

    daily_budget is in provider quota units, cost_per_request is what one dispatched
    task costs. None means the provider has no daily ceiling (Discogs).
    """

    max_requests_per_window: int = 10
    window_seconds: float = 1.0
    daily_budget: int | None = None
    cost_per_request: int = 1
    request_delay_seconds: float = 0.1
    # How long a halted limiter sleeps between re-checks of the day rollover.
    halted_poll_seconds: float = 60.0


@dataclass
class RateLimiter:
    """FIFO request queue with burst-window and daily-budget enforcement.

    Attributes:
        config: Rate limiter configuration
        name: Provider name, also the key into the quota store
        store: Where quota counters live
        clock: Monotonic clock for the burst window
        wall_clock: Epoch clock for the UTC daily window
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    name: str = "default"
    store: IQuotaStore = field(default_factory=InMemoryQuotaStore)
    clock: Callable[[], float] = time.monotonic
    wall_clock: Callable[[], float] = time.time

    # Internal state (not in __init__ signature)
    _queue: deque[tuple[Callable[[], Awaitable[Any]], asyncio.Future[Any]]] = field(
        default_factory=deque, init=False
    )
    _worker: asyncio.Task[None] | None = field(default=None, init=False)
    _halted: bool = field(default=False, init=False)

    @classmethod
    def for_youtube(cls, settings: YouTubeSettings | None = None) -> "RateLimiter":
        """Create rate limiter for the YouTube Data API.

        Hey future me - YouTube limits:
        - 10 requests/second burst (conservative)
        - 9,000 of the 10,000 daily units, 100 units per search → ~90 searches/day
        """
        settings = settings or get_settings().youtube
        return cls(
            config=RateLimiterConfig(
                max_requests_per_window=settings.max_requests_per_second,
                window_seconds=1.0,
                daily_budget=settings.daily_quota,
                cost_per_request=settings.search_quota_cost,
                request_delay_seconds=settings.request_delay_seconds,
            ),
            name=Provider.YOUTUBE.value,
        )

    @classmethod
    def for_discogs(cls, settings: DiscogsSettings | None = None) -> "RateLimiter":
        """Create rate limiter for the Discogs API.

        Discogs allows 60 authenticated requests per minute, we stay at 55.
        No daily ceiling.
        """
        settings = settings or get_settings().discogs
        return cls(
            config=RateLimiterConfig(
                max_requests_per_window=settings.max_requests_per_minute,
                window_seconds=60.0,
                daily_budget=None,
                cost_per_request=1,
                request_delay_seconds=settings.request_delay_seconds,
            ),
            name=Provider.DISCOGS.value,
        )

    async def enqueue(self, task: Callable[[], Awaitable[T]]) -> T:
        """Queue a unit of work and wait for its outcome.

        The task is a zero-argument callable returning an awaitable; it is only
        called when its turn comes. Whatever it returns or raises is passed back
        to the caller unchanged.

        Args:
            task: Work to run once the limiter allows it

        Returns:
            The task's result
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()
        self._queue.append((task, future))
        self._ensure_worker(loop)
        return await future

    def _ensure_worker(self, loop: asyncio.AbstractEventLoop) -> None:
        # A worker from a previous (closed) event loop is dead even if not done().
        if (
            self._worker is None
            or self._worker.done()
            or self._worker.get_loop() is not loop
        ):
            self._worker = loop.create_task(
                self._drain(), name=f"rate-limiter-{self.name}"
            )

    async def _drain(self) -> None:
        while self._queue:
            await self._wait_for_capacity()

            task, future = self._queue.popleft()
            if future.done():
                # Caller gave up (cancelled) while waiting in line.
                continue

            self._record_dispatch()
            try:
                result = await task()
            except asyncio.CancelledError:
                # close() hit us mid-dispatch; the popped future must not be orphaned.
                future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)

            if self.config.request_delay_seconds > 0:
                await asyncio.sleep(self.config.request_delay_seconds)

    async def _wait_for_capacity(self) -> None:
        while True:
            state = self._roll_windows()

            if self._daily_budget_exhausted(state):
                if not self._halted:
                    logger.warning(
                        f"RateLimiter[{self.name}]: daily budget exhausted "
                        f"({state.daily_budget_used}/{self.config.daily_budget}), "
                        f"holding {len(self._queue)} queued request(s) until reset"
                    )
                    self._halted = True
                await asyncio.sleep(
                    min(self._seconds_until_day_rollover(), self.config.halted_poll_seconds)
                )
                continue
            self._halted = False

            if state.requests_in_window >= self.config.max_requests_per_window:
                wait_time = self.config.window_seconds - (self.clock() - state.window_start)
                logger.info(
                    f"RateLimiter[{self.name}]: burst limit reached "
                    f"({state.requests_in_window}/{self.config.max_requests_per_window}), "
                    f"waiting {max(wait_time, 0.0):.2f}s"
                )
                await asyncio.sleep(max(wait_time, 0.0))
                continue

            return

    def _roll_windows(self) -> QuotaState:
        state = self.store.load(self.name)
        now = self.clock()
        changed = False

        if now - state.window_start >= self.config.window_seconds:
            state.window_start = now
            state.requests_in_window = 0
            changed = True

        day_key = self._current_day_key()
        if state.day_key != day_key:
            if state.daily_budget_used:
                logger.info(
                    f"RateLimiter[{self.name}]: new day, resetting daily budget "
                    f"(was {state.daily_budget_used})"
                )
            state.day_key = day_key
            state.daily_budget_used = 0
            changed = True

        if changed:
            self.store.save(self.name, state)
        return state

    def _record_dispatch(self) -> None:
        state = self.store.load(self.name)
        state.requests_in_window += 1
        state.daily_budget_used += self.config.cost_per_request
        self.store.save(self.name, state)
        logger.debug(
            f"RateLimiter[{self.name}]: dispatching request "
            f"({state.requests_in_window}/{self.config.max_requests_per_window} in window)"
        )

    def _daily_budget_exhausted(self, state: QuotaState) -> bool:
        if self.config.daily_budget is None:
            return False
        return state.daily_budget_used + self.config.cost_per_request > self.config.daily_budget

    def _current_day_key(self) -> int:
        return int(self.wall_clock() // SECONDS_PER_DAY)

    def _seconds_until_day_rollover(self) -> float:
        return SECONDS_PER_DAY - (self.wall_clock() % SECONDS_PER_DAY)

    def get_status(self) -> QuotaStatus:
        """Read-only usage snapshot, never mutates the quota state.

        For providers with a daily budget, used/max are quota units for the current
        UTC day. Otherwise they are requests in the current burst window.
        """
        state = self.store.load(self.name)

        if self.config.daily_budget is not None:
            used = state.daily_budget_used if state.day_key == self._current_day_key() else 0
            maximum = self.config.daily_budget
            remaining = max(maximum - used, 0) // self.config.cost_per_request
            window = "day"
        else:
            window_open = self.clock() - state.window_start < self.config.window_seconds
            used = state.requests_in_window if window_open else 0
            maximum = self.config.max_requests_per_window
            remaining = max(maximum - used, 0)
            window = "minute" if self.config.window_seconds == 60.0 else f"{self.config.window_seconds:g}s"

        percent_used = (used / maximum * 100.0) if maximum else 0.0
        return QuotaStatus(
            provider=self.name,
            used=used,
            max=maximum,
            percent_used=percent_used,
            queue_length=len(self._queue),
            remaining_requests=remaining,
            window=window,
        )

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def is_halted(self) -> bool:
        """True while dispatch is paused on an exhausted daily budget."""
        return self._halted

    async def close(self) -> None:
        """Stop the drain task and cancel everything still waiting in the queue."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

        while self._queue:
            _, future = self._queue.popleft()
            if not future.done():
                future.cancel()
        self._halted = False


# Module-level rate limiters (singleton pattern)
# One limiter per provider, shared by every client instance in the process.
_youtube_limiter: RateLimiter | None = None
_discogs_limiter: RateLimiter | None = None


def get_youtube_limiter() -> RateLimiter:
    """Get singleton YouTube rate limiter."""
    global _youtube_limiter
    if _youtube_limiter is None:
        _youtube_limiter = RateLimiter.for_youtube()
    return _youtube_limiter


def get_discogs_limiter() -> RateLimiter:
    """Get singleton Discogs rate limiter."""
    global _discogs_limiter
    if _discogs_limiter is None:
        _discogs_limiter = RateLimiter.for_discogs()
    return _discogs_limiter


async def close_limiters() -> None:
    """Close and forget both singleton limiters (app shutdown, tests)."""
    global _youtube_limiter, _discogs_limiter
    for limiter in (_youtube_limiter, _discogs_limiter):
        if limiter is not None:
            await limiter.close()
    _youtube_limiter = None
    _discogs_limiter = None


__all__ = [
    "InMemoryQuotaStore",
    "RateLimiter",
    "RateLimiterConfig",
    "close_limiters",
    "get_discogs_limiter",
    "get_youtube_limiter",
]

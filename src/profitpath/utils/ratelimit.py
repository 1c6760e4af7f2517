"""Rate limiting and TTL caching for calls against the aggregator.

Both the limiter's last-call time and the cache map are guarded by
asyncio locks so concurrent requests never compute overlapping wait
windows. Clocks and sleeps are injectable for tests.
"""

import asyncio
import functools
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class RateLimiter:
    """Enforces a minimum spacing between calls, shared by all callers.

    A call arriving early is delayed for the remaining interval, never
    rejected.

    Example:
        limiter = RateLimiter(interval=1.0)
        await limiter.acquire()
        response = await client.get(...)
    """

    def __init__(
        self,
        interval: float = 1.0,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        """Initialize the limiter.

        Args:
            interval: Minimum seconds between consecutive calls
            clock: Monotonic time source
            sleep: Coroutine used to wait
        """
        self.interval = interval
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> float:
        """Wait until the interval has elapsed since the previous call.

        Returns:
            Seconds spent waiting
        """
        async with self._lock:
            waited = 0.0
            if self._last_call is not None:
                remaining = self._last_call + self.interval - self._clock()
                if remaining > 0:
                    logger.debug(f"Rate limit: waiting {remaining:.3f}s")
                    await self._sleep(remaining)
                    waited = remaining
            self._last_call = self._clock()
            return waited


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and when it was stored."""

    key: str
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """In-memory cache with a fixed time-to-live.

    Expired entries are evicted lazily when next accessed.
    """

    def __init__(self, ttl: float = 60.0, clock: Optional[Clock] = None):
        self.ttl = ttl
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = asyncio.Lock()

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    async def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if absent or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry):
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: T) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RateLimitedCache:
    """Memoizes per-key results and spaces out the calls that fill it.

    Cache hits never touch the limiter. Misses wait for the limiter, then
    run the factory and store its result. Concurrent misses on one key
    share a single in-flight fetch.
    """

    def __init__(
        self,
        interval: float = 1.0,
        ttl: float = 60.0,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.limiter = RateLimiter(interval=interval, clock=clock, sleep=sleep)
        self.cache: TTLCache = TTLCache(ttl=ttl, clock=clock)
        self._inflight: dict[str, asyncio.Task] = {}

    async def get_or_fetch(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Serve a fresh cached value or fetch, cache and return a new one.

        Factory failures propagate and are not cached. If the caller is
        cancelled mid-fetch, the upstream call still runs to completion.
        """
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, factory))
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._fetch_done, key))
        else:
            logger.debug(f"Joining in-flight fetch for {key}")
        return await asyncio.shield(task)

    async def _fetch(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        await self.limiter.acquire()
        # Filled by another fetch while waiting for the limiter
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        value = await factory()
        await self.cache.set(key, value)
        return value

    def _fetch_done(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Fetch for {key} failed: {error}")

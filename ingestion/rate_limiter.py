"""
Sliding-window rate limiter for outbound source API requests.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, List
from ingestion.cache import CacheStore

logger = logging.getLogger(__name__)


class ApiRateLimiter:
    """
    Allow at most ``max_requests`` requests in any trailing 60 second window.

    Request timestamps live in the shared cache under
    ``api_rate_limiter:<identifier>``, so a resumed run using the same
    identifier continues the previous run's window.

    This component never fails; it only delays.
    """

    CACHE_KEY_PREFIX = "api_rate_limiter:"
    WINDOW_SECONDS = 60

    def __init__(
        self,
        cache: CacheStore,
        max_requests: int = 10,
        identifier: str = "default",
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.cache = cache
        self.max_requests = max_requests
        self.identifier = identifier
        self.cache_key = f"{self.CACHE_KEY_PREFIX}{identifier}"
        self._clock = clock
        self._sleep = sleep

    async def is_limit_exceeded(self) -> bool:
        timestamps = await self._get_request_timestamps()
        return len(timestamps) >= self.max_requests

    async def throttle(self) -> None:
        """Wait until another request fits in the window"""
        timestamps = await self._get_request_timestamps()

        if len(timestamps) >= self.max_requests:
            wait_time = self.WINDOW_SECONDS - (self._clock() - min(timestamps))

            if wait_time > 0:
                logger.info(
                    f"Rate limit of {self.max_requests} requests/{self.WINDOW_SECONDS}s reached. "
                    f"Waiting {wait_time:.2f} seconds"
                )
                await self._sleep(wait_time)

    async def hit(self) -> None:
        """Record a request at the current time"""
        timestamps = await self._get_request_timestamps()
        timestamps.append(self._clock())

        await self.cache.put(
            self.cache_key,
            timestamps,
            ttl_seconds=self.WINDOW_SECONDS + 10
        )

    async def remaining(self) -> int:
        timestamps = await self._get_request_timestamps()
        return max(0, self.max_requests - len(timestamps))

    async def clear(self) -> None:
        await self.cache.forget(self.cache_key)

    async def _get_request_timestamps(self) -> List[float]:
        """Timestamps still inside the window"""
        timestamps = await self.cache.get(self.cache_key, []) or []
        cutoff = self._clock() - self.WINDOW_SECONDS

        return [float(ts) for ts in timestamps if float(ts) > cutoff]

"""Token bucket pacing for outbound Spotify calls.

Hey future me - this is PACING, not retrying! Every request takes one token
from the bucket, and when the bucket is empty we sleep until it refills.
A 429 from Spotify is NOT retried here (or anywhere). It surfaces as
RemoteApiError and the caller decides what to do.

ALGORITHM: Token Bucket
- Bucket holds up to max_tokens
- Tokens refill at refill_rate per second
- Each request consumes 1 token
- Empty bucket: wait until one token is available

USAGE:
    limiter = RateLimiter.for_spotify()

    async with limiter:
        response = await client.get(url)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Bucket size and refill speed.

    Spotify tolerates roughly 180 requests per minute. 2 req/s sustained with
    a burst of 10 stays well below that even for big discographies.
    """

    max_tokens: int = 10
    refill_rate: float = 2.0  # tokens per second


@dataclass
class RateLimiter:
    """Token bucket rate limiter.

    Attributes:
        config: Bucket configuration
        clock: Monotonic time source (injectable for tests)
        sleep: Async sleep (injectable for tests)
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    name: str = "default"

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        """Start with a full bucket."""
        self._tokens = float(self.config.max_tokens)
        self._last_refill = self.clock()

    @classmethod
    def for_spotify(
        cls, max_tokens: int = 10, refill_rate: float = 2.0
    ) -> "RateLimiter":
        """Create the limiter shared by all Spotify calls."""
        return cls(
            config=RateLimiterConfig(max_tokens=max_tokens, refill_rate=refill_rate),
            name="spotify",
        )

    def _refill_tokens(self) -> None:
        now = self.clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(
            float(self.config.max_tokens),
            self._tokens + elapsed * self.config.refill_rate,
        )
        self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, waiting while the bucket is empty.

        The lock is held while sleeping so waiters are served in FIFO order
        and nobody can steal the token we are waiting for.
        """
        async with self._lock:
            self._refill_tokens()
            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    "RateLimiter[%s]: bucket empty, waiting %.2fs",
                    self.name,
                    wait_time,
                )
                await self.sleep(wait_time)
                self._refill_tokens()
            self._tokens -= 1.0

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        return None


__all__ = ["RateLimiter", "RateLimiterConfig"]

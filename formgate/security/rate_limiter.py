"""Fixed-window rate limiting on top of the ``limits`` library.

Each ``RateLimiter`` owns its counters, so the app-wide budget and the
stricter form-submission budget are counted independently even when a
request is charged against both. Counters live in a ``MemoryStorage`` whose
increments are locked per key, which keeps check-and-increment atomic under
concurrent requests.
"""

import math
import time
from dataclasses import dataclass
from typing import Literal

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

from formgate.core.errors import Rejection
from formgate.core.result import Err, Ok, Result

GLOBAL_IDENTITY = "global"


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    """Budget left in the caller's current window."""

    limit: int
    remaining: int
    reset_after: int
    window_seconds: int

    def headers(self) -> dict[str, str]:
        """The ``RateLimit-*`` response headers for this status."""
        return {
            "RateLimit-Policy": f"{self.limit};w={self.window_seconds}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class RateLimiter:
    """Count requests per identity in fixed, time-based windows.

    Once an identity exceeds ``max_requests`` within a window, every further
    request in that window is rejected with 429. The window resets by time,
    never by request count.

    Args:
        max_requests: Requests allowed per window.
        window_seconds: Window length.
        key_strategy: ``"ip"`` counts each client separately, ``"global"``
            shares one bucket between all clients.
        namespace: Distinguishes limiters sharing a storage.
        message: Message sent with every 429.
        storage: Counter storage; a private ``MemoryStorage`` by default.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: int,
        key_strategy: Literal["ip", "global"] = "ip",
        namespace: str = "app",
        message: str = "Too many requests, please try again later.",
        storage: Storage | None = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_strategy = key_strategy
        self.namespace = namespace
        self.message = message
        self._storage = storage or MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)

    def identity_for(self, client_ip: str) -> str:
        """The counter key a client is charged against."""
        return client_ip if self.key_strategy == "ip" else GLOBAL_IDENTITY

    def check(self, client_ip: str) -> Result[RateLimitStatus]:
        """Charge one request to the client's window.

        Args:
            client_ip: Address identifying the client.

        Returns:
            Result[RateLimitStatus]: The remaining budget, or a
            ``RATE_LIMIT_EXCEEDED`` rejection carrying the rate limit and
            ``Retry-After`` headers.
        """
        identity = self.identity_for(client_ip)
        allowed = self._strategy.hit(self._item, self.namespace, identity)
        stats = self._strategy.get_window_stats(self._item, self.namespace, identity)

        status = RateLimitStatus(
            limit=self.max_requests,
            remaining=max(0, stats.remaining),
            reset_after=max(0, math.ceil(stats.reset_time - time.time())),
            window_seconds=self.window_seconds,
        )
        if allowed:
            return Ok(status)

        headers = status.headers()
        headers["Retry-After"] = str(status.reset_after)
        return Err(Rejection.rate_limited(self.message, headers))

    def reset(self) -> None:
        """Clear every counter in this limiter's storage."""
        self._storage.reset()

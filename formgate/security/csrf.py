"""One-time CSRF tokens held in process memory.

A token moves through ``ISSUED -> CONSUMED`` exactly once. Safe requests
(GET/HEAD) that pass every gate are issued a fresh token in the response
header; the next mutating request must present it, and presenting it
consumes it. Replays, forgeries and tokens past their lifetime are all the
same failure to the client.

The store is single-process and non-durable: restarting the service
invalidates every outstanding token, and several workers do not share
tokens. Clients that get a 403 re-fetch a token and retry once.
"""

import secrets
import threading
import time
from collections.abc import Callable

from loguru import logger

from formgate.core.errors import Rejection
from formgate.core.result import Err, Ok, Result


class CsrfTokenStore:
    """Issue and consume one-time tokens.

    Tokens expire ``ttl_seconds`` after issuance whether or not they were
    used, and at most ``max_tokens`` are live at once (the oldest are evicted
    when a new one would exceed the cap). All operations take one lock, so
    check-and-remove is atomic across concurrent requests.

    Args:
        token_bytes: Random bytes per token; the token is their hex encoding.
        ttl_seconds: Lifetime of an unconsumed token.
        max_tokens: Upper bound on live tokens.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        *,
        token_bytes: int = 32,
        ttl_seconds: float = 3600.0,
        max_tokens: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_bytes = token_bytes
        self.ttl_seconds = ttl_seconds
        self.max_tokens = max_tokens
        self._clock = clock
        self._lock = threading.Lock()
        # Insertion ordered, so the first key is always the oldest token
        self._tokens: dict[str, float] = {}

    @property
    def live_count(self) -> int:
        """Number of tokens currently held, expired or not."""
        with self._lock:
            return len(self._tokens)

    def issue_token(self) -> str:
        """Mint a token, record it as live, and return it."""
        token = secrets.token_hex(self.token_bytes)
        with self._lock:
            now = self._clock()
            self._purge_expired_locked(now)
            while len(self._tokens) >= self.max_tokens:
                self._tokens.pop(next(iter(self._tokens)))
                logger.warning(
                    "CSRF token cap reached, evicted oldest token",
                    max_tokens=self.max_tokens,
                )
            self._tokens[token] = now + self.ttl_seconds
        return token

    def verify_and_consume(self, token: str | None) -> Result[str]:
        """Consume a token if it is live.

        Fails closed: a missing, empty, unknown, already-consumed or expired
        token is rejected. An expired token is removed as a side effect.

        Args:
            token: Value of the CSRF request header, if any.

        Returns:
            Result[str]: ``Ok(token)`` once removed, else ``CSRF_INVALID``.
        """
        if not token:
            return Err(Rejection.csrf_invalid())

        with self._lock:
            expires_at = self._tokens.pop(token, None)
            now = self._clock()

        if expires_at is None or expires_at <= now:
            return Err(Rejection.csrf_invalid())
        return Ok(token)

    def purge_expired(self) -> int:
        """Drop every expired token.

        Returns:
            int: How many tokens were removed.
        """
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def clear(self) -> None:
        """Forget all tokens."""
        with self._lock:
            self._tokens.clear()

    def _purge_expired_locked(self, now: float) -> int:
        # TTL is fixed, so expiry order matches insertion order
        removed = 0
        while self._tokens:
            oldest = next(iter(self._tokens))
            if self._tokens[oldest] > now:
                break
            del self._tokens[oldest]
            removed += 1
        return removed

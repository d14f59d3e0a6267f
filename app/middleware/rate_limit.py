"""
Rate Limiting

Per-client token bucket limiter used as a FastAPI dependency on public
endpoints that could otherwise be brute-forced (discount code checks).
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict

from fastapi import Request

from app.core.config import settings
from app.core.exceptions import RateLimitExceeded


logger = logging.getLogger(__name__)


# ============== Token Bucket ==============

@dataclass
class TokenBucket:
    """Token bucket refilled continuously at ``refill_rate`` tokens per second."""
    capacity: int
    refill_rate: float
    tokens: float = field(default=0, init=False)
    last_refill: float = field(default=0, init=False)

    def __post_init__(self):
        self.tokens = float(self.capacity)
        self.last_refill = time.monotonic()

    def consume(self, tokens: int = 1) -> bool:
        """
        Take tokens from the bucket.

        Returns:
            True if enough tokens were available, False otherwise.
        """
        self._refill()

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def seconds_until(self, tokens: int = 1) -> float:
        """Time until ``tokens`` will be available."""
        self._refill()
        missing = tokens - self.tokens
        if missing <= 0 or self.refill_rate <= 0:
            return 0.0
        return missing / self.refill_rate

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now


# ============== Rate Limiter ==============

class RateLimiter:
    """
    Token bucket rate limiter keyed by client IP.

    Instances are callable so they can be attached to a route with
    ``dependencies=[Depends(limiter)]``.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        burst_capacity: int = 10,
        scope: str = "default",
        trust_forwarded: bool = False,
        max_clients: int = 10000,
    ):
        """
        Args:
            requests_per_minute: Sustained rate limit.
            burst_capacity: Maximum burst size.
            scope: Label used in logs to tell limiters apart.
            trust_forwarded: Key on the first ``X-Forwarded-For`` hop.
            max_clients: Bucket count that triggers eviction of idle buckets.
        """
        self._buckets: Dict[str, TokenBucket] = {}
        self._burst_capacity = burst_capacity
        self._refill_rate = requests_per_minute / 60.0
        self._trust_forwarded = trust_forwarded
        self._max_clients = max_clients
        self.scope = scope

    def client_key(self, request: Request) -> str:
        """Peer address, or the first ``X-Forwarded-For`` hop when trusted."""
        forwarded = request.headers.get("X-Forwarded-For") if self._trust_forwarded else None
        if forwarded:
            ip = forwarded.split(",")[0].strip()
        else:
            ip = request.client.host if request.client else "unknown"
        return f"ip:{ip}"

    def _get_bucket(self, key: str) -> TokenBucket:
        if key not in self._buckets:
            if len(self._buckets) >= self._max_clients:
                self._evict()
            self._buckets[key] = TokenBucket(
                capacity=self._burst_capacity,
                refill_rate=self._refill_rate,
            )
        return self._buckets[key]

    def _evict(self) -> None:
        # A bucket idle long enough to refill is indistinguishable from a new one
        full_after = self._burst_capacity / self._refill_rate if self._refill_rate else 3600
        removed = self.cleanup(max_age=full_after)
        if len(self._buckets) >= self._max_clients:
            oldest = min(self._buckets, key=lambda key: self._buckets[key].last_refill)
            del self._buckets[oldest]
            removed += 1
        logger.debug("Evicted %d rate limit buckets on %s", removed, self.scope)

    def is_allowed(self, request: Request) -> bool:
        """Consume one token for the request's client."""
        return self._get_bucket(self.client_key(request)).consume()

    def retry_after(self, request: Request) -> int:
        """Whole seconds until the client may retry."""
        bucket = self._get_bucket(self.client_key(request))
        return max(1, math.ceil(bucket.seconds_until()))

    def reset(self) -> None:
        """Forget every client."""
        self._buckets.clear()

    def cleanup(self, max_age: float = 3600) -> int:
        """
        Remove buckets idle for longer than ``max_age`` seconds.

        Returns:
            Number of buckets removed.
        """
        now = time.monotonic()
        stale_keys = [
            key for key, bucket in self._buckets.items()
            if (now - bucket.last_refill) > max_age
        ]

        for key in stale_keys:
            del self._buckets[key]

        return len(stale_keys)

    async def __call__(self, request: Request) -> None:
        if self.is_allowed(request):
            return

        retry_after = self.retry_after(request)
        logger.warning(
            "Rate limit hit on %s for %s", self.scope, self.client_key(request)
        )
        raise RateLimitExceeded(retry_after=retry_after)


# ============== Limiters ==============

discount_validate_limiter = RateLimiter(
    requests_per_minute=settings.DISCOUNT_VALIDATE_RATE_PER_MINUTE,
    burst_capacity=settings.DISCOUNT_VALIDATE_BURST,
    scope="discount-validate",
    trust_forwarded=settings.TRUST_PROXY_HEADERS,
    max_clients=settings.RATE_LIMIT_MAX_CLIENTS,
)

"""
Rate Limiting Unit Tests

Tests for token bucket and rate limiter functionality.
"""

import time
from unittest.mock import MagicMock

import pytest


def _request(host: str = "127.0.0.1", forwarded: str | None = None) -> MagicMock:
    mock_request = MagicMock()
    mock_request.client.host = host
    mock_request.headers.get.return_value = forwarded
    return mock_request


class TestTokenBucket:
    """Tests for TokenBucket implementation."""

    def test_initial_tokens_at_capacity(self):
        """Verify bucket starts at full capacity."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=10, refill_rate=1.0)

        assert bucket.tokens == 10.0

    def test_consume_reduces_tokens(self):
        """Verify consuming tokens reduces count."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=10, refill_rate=0.0)

        assert bucket.consume(3) is True
        assert bucket.tokens == 7.0

    def test_consume_fails_when_empty(self):
        """Verify consume fails when insufficient tokens."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=2, refill_rate=0.1)

        assert bucket.consume(2) is True
        assert bucket.consume(1) is False

    def test_refill_over_time(self):
        """Verify tokens refill over time."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=10, refill_rate=10.0)  # 10 tokens/sec

        bucket.consume(10)
        assert bucket.tokens < 1.0

        time.sleep(0.5)

        bucket._refill()
        assert bucket.tokens >= 4.0

    def test_refill_never_exceeds_capacity(self):
        """Verify an idle bucket stays capped."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=3, refill_rate=100.0)
        bucket.last_refill -= 60

        bucket._refill()

        assert bucket.tokens == 3.0

    def test_seconds_until_when_empty(self):
        """Verify wait time follows the refill rate."""
        from app.middleware.rate_limit import TokenBucket

        bucket = TokenBucket(capacity=1, refill_rate=0.5)
        bucket.consume(1)

        assert 0 < bucket.seconds_until() <= 2.0


class TestRateLimiter:
    """Tests for RateLimiter implementation."""

    def test_allows_requests_within_limit(self):
        """Verify requests within limit are allowed."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=60, burst_capacity=5)
        mock_request = _request()

        for _ in range(5):
            assert limiter.is_allowed(mock_request) is True

    def test_blocks_requests_over_burst(self):
        """Verify requests over burst limit are blocked."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=1, burst_capacity=3)
        mock_request = _request("192.168.1.1")

        for _ in range(3):
            assert limiter.is_allowed(mock_request) is True

        assert limiter.is_allowed(mock_request) is False

    def test_clients_have_separate_buckets(self):
        """Verify one client exhausting its bucket does not affect another."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=1, burst_capacity=1)

        assert limiter.is_allowed(_request("10.0.0.1")) is True
        assert limiter.is_allowed(_request("10.0.0.1")) is False
        assert limiter.is_allowed(_request("10.0.0.2")) is True

    def test_key_ignores_forwarded_header_by_default(self):
        """Verify a client cannot dodge its bucket by rotating X-Forwarded-For."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=1, burst_capacity=1)

        allowed = [
            limiter.is_allowed(_request("1.2.3.4", forwarded=f"198.51.100.{i}"))
            for i in range(20)
        ]

        assert allowed.count(True) == 1
        assert list(limiter._buckets) == ["ip:1.2.3.4"]

    def test_key_uses_first_forwarded_hop_when_trusted(self):
        """Verify X-Forwarded-For takes precedence behind a trusted proxy."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(trust_forwarded=True)
        mock_request = _request("10.0.0.1", forwarded="203.0.113.7, 10.0.0.1")

        assert limiter.client_key(mock_request) == "ip:203.0.113.7"

    def test_key_falls_back_to_peer_address(self):
        """Verify the peer address is used without a proxy header."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(trust_forwarded=True)

        assert limiter.client_key(_request("10.0.0.9")) == "ip:10.0.0.9"

    def test_bucket_count_is_bounded(self):
        """Verify many distinct clients never grow the map past max_clients."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=1, burst_capacity=1, max_clients=10)

        for i in range(50):
            limiter.is_allowed(_request(f"10.2.0.{i}"))

        assert len(limiter._buckets) <= 10
        assert "ip:10.2.0.49" in limiter._buckets

    def test_eviction_prefers_refilled_buckets(self):
        """Verify idle, refilled buckets are dropped before active ones."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=60, burst_capacity=1, max_clients=2)
        limiter.is_allowed(_request("10.3.0.1"))
        limiter.is_allowed(_request("10.3.0.2"))
        limiter._buckets["ip:10.3.0.1"].last_refill -= 120

        limiter.is_allowed(_request("10.3.0.3"))

        assert set(limiter._buckets) == {"ip:10.3.0.2", "ip:10.3.0.3"}

    def test_cleanup_removes_stale_buckets(self):
        """Verify cleanup removes old buckets."""
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=60, burst_capacity=5)
        limiter.is_allowed(_request("10.0.0.1"))
        assert len(limiter._buckets) == 1

        limiter._buckets["ip:10.0.0.1"].last_refill -= 120
        removed = limiter.cleanup(max_age=60)

        assert removed == 1
        assert len(limiter._buckets) == 0

    @pytest.mark.asyncio
    async def test_dependency_raises_when_limited(self):
        """Verify the dependency raises 429 with a Retry-After header."""
        from app.core.exceptions import RateLimitExceeded
        from app.middleware.rate_limit import RateLimiter

        limiter = RateLimiter(requests_per_minute=6, burst_capacity=1, scope="test")
        mock_request = _request("10.1.1.1")

        await limiter(mock_request)
        with pytest.raises(RateLimitExceeded) as exc_info:
            await limiter(mock_request)

        assert exc_info.value.status_code == 429
        assert int(exc_info.value.headers["Retry-After"]) >= 1

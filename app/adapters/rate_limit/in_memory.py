"""In-memory windowed rate limiter for magic-link sends.

Notes:
- Per-process only: running multiple workers multiplies the effective limits.
- Thread-safe: a lock serializes read-compare-increment on shared buckets.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitReason, RateLimitResult


@dataclass
class _Bucket:
    count: int
    reset_at: float
    last_at: float | None = None


class InMemoryRateLimiter(AbstractRateLimiter):
    """Per-IP and per-email counters with a lazily reset window and a per-email cooldown.

    A bucket's window starts with the first request after the previous one
    expired; there is no fixed window alignment. Expired buckets are replaced
    on access and dropped by cleanup().
    """

    def __init__(
        self,
        *,
        window_seconds: float,
        ip_max: int,
        email_max: int,
        email_cooldown_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_seconds: Lifetime of a bucket from its first use.
            ip_max: Maximum accepted sends per IP per window.
            email_max: Maximum accepted sends per email per window.
            email_cooldown_seconds: Minimum spacing between sends to one email.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is invalid.
        """
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if ip_max < 1:
            raise ValueError("ip_max must be >= 1")
        if email_max < 1:
            raise ValueError("email_max must be >= 1")
        if email_cooldown_seconds < 0:
            raise ValueError("email_cooldown_seconds must be >= 0")

        self._window_seconds = window_seconds
        self._ip_max = ip_max
        self._email_max = email_max
        self._email_cooldown_seconds = email_cooldown_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._ip_buckets: dict[str, _Bucket] = {}
        self._email_buckets: dict[str, _Bucket] = {}

    def _get_bucket(self, buckets: dict[str, _Bucket], key: str, now: float) -> _Bucket:
        bucket = buckets.get(key)
        if bucket is None or bucket.reset_at <= now:
            bucket = _Bucket(count=0, reset_at=now + self._window_seconds)
            buckets[key] = bucket
        return bucket

    @staticmethod
    def _blocked(reason: RateLimitReason, wait: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=False,
            reason=reason,
            retry_after_seconds=max(1, int(math.ceil(wait))),
        )

    def check_ip(self, ip: str) -> RateLimitResult:
        if not ip:
            raise ValueError("ip must be a non-empty string")
        now = self._clock()
        with self._lock:
            bucket = self._get_bucket(self._ip_buckets, ip, now)
            if bucket.count >= self._ip_max:
                return self._blocked(RateLimitReason.IP_LIMIT, bucket.reset_at - now)
        return RateLimitResult(allowed=True)

    def consume(self, ip: str, email: str) -> RateLimitResult:
        if not ip:
            raise ValueError("ip must be a non-empty string")
        if not email:
            raise ValueError("email must be a non-empty string")

        now = self._clock()
        with self._lock:
            ip_bucket = self._get_bucket(self._ip_buckets, ip, now)
            if ip_bucket.count >= self._ip_max:
                return self._blocked(RateLimitReason.IP_LIMIT, ip_bucket.reset_at - now)

            email_bucket = self._get_bucket(self._email_buckets, email.lower(), now)
            if (
                email_bucket.last_at is not None
                and now - email_bucket.last_at < self._email_cooldown_seconds
            ):
                wait = self._email_cooldown_seconds - (now - email_bucket.last_at)
                return self._blocked(RateLimitReason.EMAIL_COOLDOWN, wait)
            if email_bucket.count >= self._email_max:
                return self._blocked(RateLimitReason.EMAIL_LIMIT, email_bucket.reset_at - now)

            ip_bucket.count += 1
            ip_bucket.last_at = now
            email_bucket.count += 1
            email_bucket.last_at = now
        return RateLimitResult(allowed=True)

    def cleanup(self) -> int:
        now = self._clock()
        removed = 0
        with self._lock:
            for buckets in (self._ip_buckets, self._email_buckets):
                expired = [key for key, bucket in buckets.items() if bucket.reset_at <= now]
                for key in expired:
                    del buckets[key]
                removed += len(expired)
        return removed

    def bucket_count(self) -> int:
        """Number of live buckets (IP + email); used by tests and diagnostics."""
        with self._lock:
            return len(self._ip_buckets) + len(self._email_buckets)

"""Rate limiter interface for magic-link sends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class RateLimitReason(str, Enum):
    """Why a request was refused."""

    IP_LIMIT = "ip_limit"
    EMAIL_COOLDOWN = "email_cooldown"
    EMAIL_LIMIT = "email_limit"


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a check or consume call.

    Attributes:
        allowed: Whether the request may proceed.
        reason: Set when blocked; tells the caller which budget ran out.
        retry_after_seconds: Suggested wait before retrying when blocked.
    """

    allowed: bool
    reason: RateLimitReason | None = None
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Windowed counters keyed by client IP and by lowercased email."""

    @abstractmethod
    def check_ip(self, ip: str) -> RateLimitResult:
        """Check the IP budget without consuming it."""
        raise NotImplementedError

    @abstractmethod
    def consume(self, ip: str, email: str) -> RateLimitResult:
        """Atomically check both budgets and, when allowed, consume one unit of each."""
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> int:
        """Drop expired state; return the number of buckets removed."""
        raise NotImplementedError

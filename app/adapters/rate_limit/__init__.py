"""Magic-link rate limiting adapters.

Call sites depend on AbstractRateLimiter only, so the in-memory backend can be
replaced by a shared counter store (e.g. Redis) without touching the routes.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitReason, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryRateLimiter", "RateLimitReason", "RateLimitResult"]

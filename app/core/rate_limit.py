"""Rate limiting wiring for the HTTP layer.

The limiter instance is process-wide; a background task started by the app
lifespan sweeps expired buckets so memory stays bounded.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Annotated

from fastapi import Depends, Request

from app.adapters.rate_limit import AbstractRateLimiter, InMemoryRateLimiter, RateLimitReason, RateLimitResult
from app.core.config import Settings, get_settings
from app.core.errors import RateLimitError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGES = {
    RateLimitReason.IP_LIMIT: "Too many attempts from this network. Please wait and try again.",
    RateLimitReason.EMAIL_COOLDOWN: "Please wait a moment before requesting another confirmation email.",
    RateLimitReason.EMAIL_LIMIT: (
        "Too many confirmation emails requested for this address. Please wait and try again."
    ),
}

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int, int] | None = None


def get_rate_limiter(settings: Annotated[Settings, Depends(get_settings)]) -> AbstractRateLimiter:
    """Return the process-wide limiter, rebuilding it only when the limits change."""
    global _limiter, _limiter_config

    config = (
        settings.RATE_WINDOW_SEC,
        settings.RATE_IP_MAX,
        settings.RATE_EMAIL_MAX,
        settings.RATE_EMAIL_COOLDOWN_SEC,
    )
    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryRateLimiter(
            window_seconds=settings.RATE_WINDOW_SEC,
            ip_max=settings.RATE_IP_MAX,
            email_max=settings.RATE_EMAIL_MAX,
            email_cooldown_seconds=settings.RATE_EMAIL_COOLDOWN_SEC,
        )
        _limiter_config = config
    return _limiter


def client_ip(request: Request, trusted_hops: int) -> str:
    """Resolve the caller IP, trusting the last `trusted_hops` X-Forwarded-For entries."""
    if trusted_hops > 0:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [h.strip() for h in forwarded.split(",") if h.strip()]
        if len(hops) >= trusted_hops:
            return hops[-trusted_hops]
    return request.client.host if request.client else "unknown"


def _hash_key(key: str) -> str:
    """Hash a limiter key for logging without exposing addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def raise_for_result(result: RateLimitResult, key: str) -> None:
    """Raise RateLimitError with the cause-specific message when result is blocked."""
    if result.allowed or result.reason is None:
        return
    logger.warning(
        "Rate limit exceeded",
        extra={
            "reason": result.reason.value,
            "key_hash": _hash_key(key),
            "retry_after_s": result.retry_after_seconds,
        },
    )
    raise RateLimitError(RATE_LIMIT_MESSAGES[result.reason], retry_after=result.retry_after_seconds)


def enforce_ip_rate_limit(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
) -> str:
    """Dependency: refuse early when the caller IP is over budget; returns the resolved IP."""
    ip = client_ip(request, settings.TRUST_PROXY_HOPS)
    raise_for_result(limiter.check_ip(ip), ip)
    return ip


async def run_cleanup_loop(limiter: AbstractRateLimiter, interval_seconds: float) -> None:
    """Sweep expired buckets every interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.cleanup()
        if removed:
            logger.debug("Rate limit cleanup removed %s buckets", removed)

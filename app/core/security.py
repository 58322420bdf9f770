"""JWT creation/verification for magic-link confirmation and cookie sessions."""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Response

from app.core.config import Settings
from app.core.errors import ConfigurationError, TokenError
from app.schemas.session import MagicLinkClaims, Viewer

# Token "typ" claims; a session token can never confirm a promise and vice versa.
MAGIC_LINK_TOKEN_TYPE = "magic_link"
SESSION_TOKEN_TYPE = "session"


def require_jwt_secret(settings: Settings) -> str:
    if settings.JWT_SECRET is None:
        raise ConfigurationError("JWT_SECRET is not configured.")
    return settings.JWT_SECRET.get_secret_value()


def _encode(settings: Settings, claims: dict[str, Any], expires_in: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {**claims, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, require_jwt_secret(settings), algorithm=settings.JWT_ALGORITHM)


def _decode(settings: Settings, token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises jwt.PyJWTError on invalid or expired token."""
    return jwt.decode(
        token,
        require_jwt_secret(settings),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp", "iat"]},
    )


def create_magic_link_token(settings: Settings, user_id: int, promise_id: int) -> str:
    """Sign {userId, promiseId} with the configured magic-link expiry."""
    return _encode(
        settings,
        {"typ": MAGIC_LINK_TOKEN_TYPE, "userId": user_id, "promiseId": promise_id},
        settings.magic_link_expiry,
    )


def decode_magic_link_token(settings: Settings, token: str) -> MagicLinkClaims:
    """
    Verify a magic-link token and return its claims.
    Raises TokenError for every failure so callers cannot tell the causes apart.
    """
    try:
        payload = _decode(settings, token)
    except jwt.PyJWTError as e:
        raise TokenError() from e
    if payload.get("typ") != MAGIC_LINK_TOKEN_TYPE:
        raise TokenError()
    user_id = payload.get("userId")
    promise_id = payload.get("promiseId")
    if not isinstance(user_id, int) or not isinstance(promise_id, int):
        raise TokenError()
    return MagicLinkClaims(user_id=user_id, promise_id=promise_id)


def create_session_token(settings: Settings, user_id: int) -> str:
    return _encode(
        settings,
        {"typ": SESSION_TOKEN_TYPE, "userId": user_id},
        timedelta(days=settings.SESSION_EXPIRE_DAYS),
    )


def decode_session_token(settings: Settings, token: str | None) -> Viewer | None:
    """Return the viewer for a session token, or None when it is absent or invalid for any reason."""
    if not token or settings.JWT_SECRET is None:
        return None
    try:
        payload = _decode(settings, token)
    except jwt.PyJWTError:
        return None
    user_id = payload.get("userId")
    if payload.get("typ") != SESSION_TOKEN_TYPE or not isinstance(user_id, int):
        return None
    return Viewer(user_id=user_id)


def set_session_cookie(response: Response, settings: Settings, user_id: int) -> None:
    """Attach a signed session cookie (http-only, SameSite=Lax, secure in prod)."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(settings, user_id),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )

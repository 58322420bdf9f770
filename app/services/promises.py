"""Promise workflow: submission with magic-link issuance, and email confirmation.

Status moves once, from 'pending_email_verification' to 'submitted', and only
through confirm_promise(), which updates the user and the promise in one
transaction.
"""

import logging
from email.errors import HeaderParseError
from email.headerregistry import Address
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.rate_limit import AbstractRateLimiter
from app.core.config import Settings
from app.core.errors import BadRequestError, ConfigurationError, ServiceError, TokenError
from app.core.rate_limit import raise_for_result
from app.core.security import create_magic_link_token, decode_magic_link_token, require_jwt_secret
from app.models import Promise, User
from app.models.promise import PROMISE_STATUS_PENDING, PROMISE_STATUS_SUBMITTED
from app.schemas.promises import PromiseCreatedResponse, PromiseCreateRequest, PromiseSummary
from app.services.email_validation import is_safe_email_address, safe_display_name
from app.services.mailer import Mailer, MailerError, build_confirmation_email

logger = logging.getLogger(__name__)

CONFIRM_PATH = "/api/promises/confirm"
MESSAGE_EMAIL_SENT = "Magic-link email sent."
MESSAGE_LINK_LOGGED = "Magic-link generated (logged on server)."


class _NothingToConfirm(Exception):
    """The token's user or pending promise no longer matches a row."""


def require_app_base_url(settings: Settings) -> str:
    if not settings.APP_BASE_URL:
        raise ConfigurationError("APP_BASE_URL is not configured (needed for magic link).")
    return settings.APP_BASE_URL


def require_thank_you_url(settings: Settings) -> str:
    if not settings.THANK_YOU_URL:
        raise ConfigurationError("THANK_YOU_URL is not configured (needed for magic link redirect).")
    return settings.THANK_YOU_URL


def build_confirm_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}{CONFIRM_PATH}?token={quote(token, safe='')}"


def _insert_for(db: Session):
    """Dialect-specific INSERT supporting ON CONFLICT (Postgres in production, SQLite locally)."""
    return sqlite_insert if db.get_bind().dialect.name == "sqlite" else pg_insert


def upsert_user(db: Session, email: str, full_name: str) -> int:
    """
    Insert the user or overwrite full_name of the existing row with this email; return its id.
    Single statement relying on the unique email constraint, so concurrent submits cannot duplicate.
    """
    insert = _insert_for(db)
    stmt = insert(User).values(email=email, full_name=full_name, email_verified=False)
    stmt = stmt.on_conflict_do_update(
        index_elements=["email"],
        set_={"full_name": stmt.excluded.full_name, "updated_at": func.now()},
    ).returning(User.id)
    return db.execute(stmt).scalar_one()


def create_pending_promise(db: Session, user_id: int, opportunity_key: str, payload: object) -> Promise:
    promise = Promise(
        user_id=user_id,
        opportunity_key=opportunity_key,
        status=PROMISE_STATUS_PENDING,
        payload=payload,
    )
    db.add(promise)
    db.flush()
    return promise


def _validate_submission(body: PromiseCreateRequest) -> None:
    if not body.opportunity_key or not body.email or not body.full_name or body.payload is None:
        raise BadRequestError("Missing required fields.")
    if not is_safe_email_address(body.email):
        raise BadRequestError("Invalid email address.")


def _recipient_address(display_name: str, email: str) -> Address:
    """Recipient pair for the confirmation email; addresses the mail headers cannot carry are rejected."""
    try:
        return Address(display_name=display_name, addr_spec=email)
    except (ValueError, HeaderParseError) as e:
        raise BadRequestError("Invalid email address.") from e


def _sender_address(settings: Settings) -> Address:
    try:
        return Address(display_name=settings.FROM_NAME, addr_spec=settings.FROM_EMAIL)
    except (ValueError, HeaderParseError) as e:
        raise ConfigurationError("FROM_EMAIL is not a valid address.") from e


def _record_pending_promise(
    db: Session, email: str, full_name: str, opportunity_key: str, payload: object
) -> tuple[int, Promise]:
    """Upsert the user and insert the pending promise in one commit; runs in a worker thread."""
    try:
        user_id = upsert_user(db, email, full_name)
        promise = create_pending_promise(db, user_id, opportunity_key, payload)
        db.commit()
        db.refresh(promise)
    except SQLAlchemyError as e:
        _rollback_quietly(db)
        logger.exception("Promise submission failed at the database")
        raise ServiceError("Failed to submit promise.") from e
    return user_id, promise


async def submit_promise(
    db: Session,
    settings: Settings,
    limiter: AbstractRateLimiter,
    mailer: Mailer | None,
    *,
    client_ip: str,
    body: PromiseCreateRequest,
) -> PromiseCreatedResponse:
    """
    Record a pending promise and deliver (or log) its magic link.

    Every input check, including building the mail addresses, happens before the
    rate-limit budget is spent or anything is written.

    Raises ConfigurationError, BadRequestError, RateLimitError or ServiceError.
    """
    require_jwt_secret(settings)
    base_url = require_app_base_url(settings)
    _validate_submission(body)

    email = body.email.lower()
    display_name = safe_display_name(body.full_name)
    recipient = _recipient_address(display_name, email)
    sender = _sender_address(settings) if mailer is not None else None

    raise_for_result(limiter.consume(client_ip, email), email)

    user_id, promise = await run_in_threadpool(
        _record_pending_promise, db, email, body.full_name, body.opportunity_key, body.payload
    )

    token = create_magic_link_token(settings, user_id, promise.id)
    confirm_url = build_confirm_url(base_url, token)

    if mailer is not None:
        subject, text = build_confirmation_email(display_name, confirm_url)
        try:
            await mailer.send(sender=sender, recipient=recipient, subject=subject, body=text)
        except MailerError as e:
            logger.error(
                "Magic-link email failed",
                extra={"promise_id": promise.id, "reason": (e.message or str(e))[:500]},
            )
            raise ServiceError("Failed to submit promise.") from e
        message = MESSAGE_EMAIL_SENT
    else:
        logger.warning("[MAGIC LINK - SMTP not configured] %s", confirm_url)
        message = MESSAGE_LINK_LOGGED

    logger.info(
        "Promise submitted",
        extra={"promise_id": promise.id, "user_id": user_id, "email_sent": mailer is not None},
    )
    return PromiseCreatedResponse(
        promise=PromiseSummary(
            id=promise.id,
            status=promise.status,
            opportunity_key=promise.opportunity_key,
            created_at=promise.created_at,
        ),
        message=message,
    )


def _mark_user_verified(db: Session, user_id: int) -> None:
    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(email_verified=True, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise _NothingToConfirm(f"user {user_id}")


def _mark_promise_submitted(db: Session, promise_id: int, user_id: int) -> None:
    result = db.execute(
        update(Promise)
        .where(
            Promise.id == promise_id,
            Promise.user_id == user_id,
            Promise.status == PROMISE_STATUS_PENDING,
        )
        .values(status=PROMISE_STATUS_SUBMITTED, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise _NothingToConfirm(f"promise {promise_id}")


def _rollback_quietly(db: Session) -> None:
    """Roll back; a rollback failure is logged so it cannot mask the original error."""
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.warning("Rollback failed", exc_info=True)


def confirm_promise(db: Session, settings: Settings, token: str | None) -> int:
    """
    Verify a magic-link token, mark the user verified and the promise submitted, atomically.

    Returns the verified user id. Raises ConfigurationError or TokenError; token
    errors never say which check failed. A token only confirms a still-pending
    promise, so a replayed link is rejected.
    """
    require_jwt_secret(settings)
    require_thank_you_url(settings)
    if not token:
        raise TokenError("Missing token.")

    claims = decode_magic_link_token(settings, token)
    try:
        _mark_user_verified(db, claims.user_id)
        _mark_promise_submitted(db, claims.promise_id, claims.user_id)
        db.commit()
    except (SQLAlchemyError, _NothingToConfirm) as e:
        _rollback_quietly(db)
        logger.warning(
            "Promise confirmation rolled back",
            extra={"user_id": claims.user_id, "promise_id": claims.promise_id, "reason": str(e)[:200]},
        )
        raise TokenError() from e

    logger.info(
        "Promise confirmed",
        extra={"user_id": claims.user_id, "promise_id": claims.promise_id},
    )
    return claims.user_id

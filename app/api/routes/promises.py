"""Promise submission (gate-on-submit) and magic-link confirmation."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.adapters.rate_limit import AbstractRateLimiter
from app.api.deps import get_mail_transport
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.rate_limit import enforce_ip_rate_limit, get_rate_limiter
from app.core.security import set_session_cookie
from app.schemas.promises import PromiseCreatedResponse, PromiseCreateRequest
from app.services.mailer import Mailer
from app.services.promises import confirm_promise, submit_promise

router = APIRouter()


@router.post("", response_model=PromiseCreatedResponse)
async def post_promise(
    body: PromiseCreateRequest,
    client_ip: Annotated[str, Depends(enforce_ip_rate_limit)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
    mailer: Annotated[Mailer | None, Depends(get_mail_transport)],
) -> PromiseCreatedResponse:
    """
    Create a promise in 'pending_email_verification' and send a magic link to the email.

    Body: opportunity_key, email, full_name, payload (opaque JSON). When SMTP is
    not configured the link is written to the server log instead.
    """
    return await submit_promise(
        db,
        settings,
        limiter,
        mailer,
        client_ip=client_ip,
        body=body,
    )


@router.get("/confirm")
def get_confirm_promise(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    token: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """Confirm the email behind a magic link, start a session, and redirect to the thank-you page."""
    user_id = confirm_promise(db, settings, token)
    response = RedirectResponse(url=settings.THANK_YOU_URL, status_code=302)
    set_session_cookie(response, settings, user_id)
    return response

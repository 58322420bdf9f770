"""Shared route dependencies: optional viewer and mail transport."""

from typing import Annotated

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.security import decode_session_token
from app.schemas.session import Viewer
from app.services.mailer import Mailer, get_mailer


def get_viewer(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> Viewer | None:
    """Dependency: viewer from the session cookie; None when absent, invalid or expired."""
    return decode_session_token(settings, request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_mail_transport(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Mailer | None:
    """Dependency: SMTP mailer, or None to log magic links instead of sending them."""
    return get_mailer(settings)

"""Outbound mail: confirmation email content and the SMTP transport."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from email.headerregistry import Address
from email.message import EmailMessage
from typing import TYPE_CHECKING

import aiosmtplib

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Confirm your founding promise for the League"


class MailerError(Exception):
    """Raised when the transport fails to hand off a message."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class Mailer(ABC):
    """Send-message interface; sender and recipient are structured (name, address) pairs."""

    @abstractmethod
    async def send(self, *, sender: Address, recipient: Address, subject: str, body: str) -> None:
        raise NotImplementedError


def build_message(*, sender: Address, recipient: Address, subject: str, body: str) -> EmailMessage:
    """Build a plain-text message; headers are rendered from Address objects, never from strings."""
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


class SmtpMailer(Mailer):
    """SMTP transport via aiosmtplib. Implicit TLS on port 465, STARTTLS when offered otherwise."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        timeout: float,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._timeout = timeout

    async def send(self, *, sender: Address, recipient: Address, subject: str, body: str) -> None:
        msg = build_message(sender=sender, recipient=recipient, subject=subject, body=body)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                use_tls=self._port == 465,
                timeout=self._timeout,
            )
        except aiosmtplib.SMTPException as e:
            raise MailerError(f"SMTP send failed: {e!s}", cause=e) from e


def is_smtp_configured(settings: Settings) -> bool:
    if not settings.SMTP_HOST or not settings.SMTP_HOST.strip():
        return False
    if not settings.SMTP_PORT:
        return False
    if not settings.SMTP_USER or not settings.SMTP_USER.strip():
        return False
    if settings.SMTP_PASS is None or not settings.SMTP_PASS.get_secret_value():
        return False
    return True


def get_mailer(settings: Settings) -> Mailer | None:
    """Return the SMTP mailer, or None when SMTP is not fully configured."""
    if not is_smtp_configured(settings):
        return None
    return SmtpMailer(
        host=settings.SMTP_HOST.strip(),
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER.strip(),
        password=settings.SMTP_PASS.get_secret_value(),
        timeout=settings.SMTP_TIMEOUT_SEC,
    )


def build_confirmation_email(display_name: str, confirm_url: str) -> tuple[str, str]:
    """Return (subject, body) for the magic-link email."""
    greeting = f"Hello {display_name}," if display_name else "Hello,"
    body = f"""{greeting}

Thank you for submitting a founding promise.

To verify your email and finalize your commitment, click:
{confirm_url}

If you did not initiate this, you can ignore this email.

- Picketly
"""
    return CONFIRMATION_SUBJECT, body

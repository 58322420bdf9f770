"""Shared test fixtures: settings, in-memory SQLite sessions and a recording mailer."""

from email.headerregistry import Address
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.models import Base
from app.services.mailer import Mailer

TEST_SECRET = "test-secret"


def make_settings(**overrides: Any) -> Settings:
    """Build Settings without reading .env; overrides win over the test defaults."""
    values: dict[str, Any] = {
        "APP_ENV": "dev",
        "JWT_SECRET": TEST_SECRET,
        "APP_BASE_URL": "http://api.picketly.test",
        "THANK_YOU_URL": "https://picketly.test/thank-you",
        "DATABASE_URL": "sqlite+pysqlite://",
        "SMTP_HOST": None,
        "SMTP_PORT": None,
        "SMTP_USER": None,
        "SMTP_PASS": None,
        "TRUST_PROXY_HOPS": 1,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_sessionmaker() -> sessionmaker[Session]:
    """Fresh in-memory SQLite database with all tables, shareable across threads."""
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class RecordingMailer(Mailer):
    """Mailer that keeps every message in memory."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send(self, *, sender: Address, recipient: Address, subject: str, body: str) -> None:
        self.sent.append(
            {"sender": sender, "recipient": recipient, "subject": subject, "body": body}
        )

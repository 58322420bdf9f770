"""PostgreSQL connection and session management."""

from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings, get_settings
from app.core.errors import ConfigurationError


@lru_cache
def get_engine(database_url: str, sslmode: str | None = None, echo: bool = False) -> Engine:
    """Return one pooled engine per (url, sslmode) pair."""
    connect_args: dict[str, str] = {}
    if sslmode and database_url.startswith("postgres"):
        connect_args["sslmode"] = sslmode
    return create_engine(
        database_url,
        pool_pre_ping=True,
        echo=echo,
        connect_args=connect_args,
    )


@lru_cache
def get_sessionmaker(database_url: str, sslmode: str | None = None, echo: bool = False) -> sessionmaker[Session]:
    engine = get_engine(database_url, sslmode, echo)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def require_database_url(settings: Settings) -> str:
    if not settings.DATABASE_URL:
        raise ConfigurationError("DATABASE_URL is not configured.")
    return settings.DATABASE_URL


def get_db(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done.

    Raises ConfigurationError before the route runs when DATABASE_URL is unset.
    """
    url = require_database_url(settings)
    db = get_sessionmaker(url, settings.PGSSLMODE, settings.DEBUG)()
    try:
        yield db
    finally:
        db.close()


"""Application configuration loaded from environment variables."""

import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root, so relative paths don't depend on the current working directory.
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
    "sqlite+pysqlite://",
)

# Durations like "90s", "15m", "1h", "2d" or bare seconds ("3600").
_DURATION_RE = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> timedelta:
    """Parse a short duration string into a timedelta. Raises ValueError if malformed."""
    match = _DURATION_RE.match(value.strip().lower())
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    seconds = int(amount) * _DURATION_UNITS[unit]
    if seconds <= 0:
        raise ValueError("Duration must be positive")
    return timedelta(seconds=seconds)


def _validate_http_url(name: str, v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    s = v.strip().rstrip("/")
    if not (s.lower().startswith("http://") or s.lower().startswith("https://")):
        raise ValueError(f"{name} must use http or https (e.g. https://api.example.com)")
    return s


class Settings(BaseSettings):
    """Validated, immutable application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Comma-separated list of allowed origins, e.g.
    # "https://your-funnel.clickfunnels.com,https://picketly.example"
    FRONTEND_ALLOWED_ORIGINS: str = ""
    # Reverse-proxy hops to trust in X-Forwarded-For (0 = use the socket peer).
    TRUST_PROXY_HOPS: int = 1

    # Public base URL of this API; the confirmation link points here.
    APP_BASE_URL: str | None = None
    # Where the user lands after clicking the magic link.
    THANK_YOU_URL: str | None = None

    # Signing key for magic-link and session tokens; required by the promise and session flows.
    JWT_SECRET: SecretStr | None = None
    JWT_ALGORITHM: str = "HS256"
    MAGIC_LINK_EXPIRY: str = "1h"
    SESSION_COOKIE_NAME: str = "picketly_session"
    SESSION_EXPIRE_DAYS: int = 30

    # Postgres: optional at startup; routes that need it fail with a configuration error.
    DATABASE_URL: str | None = None
    PGSSLMODE: str | None = None

    # Email (SMTP): the transport is used only when host, port, user and password are all set.
    FROM_EMAIL: str = "no-reply@picketly.example"
    FROM_NAME: str = "Picketly"
    SMTP_HOST: str | None = None
    SMTP_PORT: int | None = None
    SMTP_USER: str | None = None
    SMTP_PASS: SecretStr | None = None
    SMTP_TIMEOUT_SEC: float = 30.0

    # Magic-link rate limiting (in-memory, single instance).
    RATE_WINDOW_SEC: int = 600
    RATE_IP_MAX: int = 20
    RATE_EMAIL_MAX: int = 5
    RATE_EMAIL_COOLDOWN_SEC: int = 60
    RATE_CLEANUP_INTERVAL_SEC: int = 60

    # Static opportunity catalog, read on every request.
    OPPORTUNITIES_PATH: str = "data/opportunities.json"

    # Request bodies above this many bytes are refused with 413.
    MAX_BODY_BYTES: int = 1024 * 1024

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL URL (e.g. postgresql:// or postgresql+psycopg2://)"
            )
        return v.strip()

    @field_validator("APP_BASE_URL")
    @classmethod
    def validate_app_base_url(cls, v: str | None) -> str | None:
        return _validate_http_url("APP_BASE_URL", v)

    @field_validator("THANK_YOU_URL")
    @classmethod
    def validate_thank_you_url(cls, v: str | None) -> str | None:
        return _validate_http_url("THANK_YOU_URL", v)

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr | None) -> SecretStr | None:
        if v is None or not v.get_secret_value().strip():
            return None
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("MAGIC_LINK_EXPIRY")
    @classmethod
    def validate_magic_link_expiry(cls, v: str) -> str:
        parse_duration(v)
        return v.strip()

    @field_validator("SESSION_EXPIRE_DAYS")
    @classmethod
    def validate_session_expire_days(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("SESSION_EXPIRE_DAYS must be between 1 and 365")
        return v

    @field_validator("TRUST_PROXY_HOPS")
    @classmethod
    def validate_trust_proxy_hops(cls, v: int) -> int:
        if v < 0:
            raise ValueError("TRUST_PROXY_HOPS must be 0 or greater")
        return v

    @field_validator("SMTP_TIMEOUT_SEC")
    @classmethod
    def validate_smtp_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError("SMTP_TIMEOUT_SEC must be greater than 0 and at most 120")
        return v

    @field_validator(
        "RATE_WINDOW_SEC",
        "RATE_IP_MAX",
        "RATE_EMAIL_MAX",
        "RATE_CLEANUP_INTERVAL_SEC",
        "MAX_BODY_BYTES",
    )
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Limit settings must be 1 or greater")
        return v

    @field_validator("RATE_EMAIL_COOLDOWN_SEC")
    @classmethod
    def validate_email_cooldown(cls, v: int) -> int:
        if v < 0:
            raise ValueError("RATE_EMAIL_COOLDOWN_SEC must be 0 or greater")
        return v

    @property
    def allowed_origins(self) -> list[str]:
        return [s.strip() for s in self.FRONTEND_ALLOWED_ORIGINS.split(",") if s.strip()]

    @property
    def magic_link_expiry(self) -> timedelta:
        return parse_duration(self.MAGIC_LINK_EXPIRY)

    @property
    def session_max_age_seconds(self) -> int:
        return self.SESSION_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def cookie_secure(self) -> bool:
        return self.APP_ENV == "prod"

    @property
    def opportunities_file(self) -> Path:
        path = Path(self.OPPORTUNITIES_PATH)
        return path if path.is_absolute() else PROJECT_ROOT / path


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()

"""Unit tests for app.core.config: defaults, validation and derived values."""

import unittest
from datetime import timedelta

from pydantic import ValidationError

from app.core.config import PROJECT_ROOT, parse_duration
from tests.support import make_settings


class TestParseDuration(unittest.TestCase):
    def test_units(self) -> None:
        self.assertEqual(parse_duration("1h"), timedelta(hours=1))
        self.assertEqual(parse_duration("15m"), timedelta(minutes=15))
        self.assertEqual(parse_duration("2d"), timedelta(days=2))
        self.assertEqual(parse_duration("90s"), timedelta(seconds=90))
        self.assertEqual(parse_duration("3600"), timedelta(hours=1))

    def test_rejects_malformed(self) -> None:
        for value in ("", "h", "1w", "-1h", "0", "1.5h"):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_duration(value)


class TestSettings(unittest.TestCase):
    """Settings defaults and validators."""

    def test_rate_limit_defaults(self) -> None:
        settings = make_settings()
        self.assertEqual(settings.RATE_WINDOW_SEC, 600)
        self.assertEqual(settings.RATE_IP_MAX, 20)
        self.assertEqual(settings.RATE_EMAIL_MAX, 5)
        self.assertEqual(settings.RATE_EMAIL_COOLDOWN_SEC, 60)
        self.assertEqual(settings.MAX_BODY_BYTES, 1024 * 1024)
        self.assertEqual(settings.magic_link_expiry, timedelta(hours=1))
        self.assertEqual(settings.session_max_age_seconds, 30 * 24 * 60 * 60)

    def test_allowed_origins_split(self) -> None:
        settings = make_settings(FRONTEND_ALLOWED_ORIGINS=" https://a.example , ,https://b.example")
        self.assertEqual(settings.allowed_origins, ["https://a.example", "https://b.example"])
        self.assertEqual(make_settings(FRONTEND_ALLOWED_ORIGINS="").allowed_origins, [])

    def test_blank_optional_values_become_none(self) -> None:
        settings = make_settings(JWT_SECRET="  ", DATABASE_URL=" ", APP_BASE_URL="")
        self.assertIsNone(settings.JWT_SECRET)
        self.assertIsNone(settings.DATABASE_URL)
        self.assertIsNone(settings.APP_BASE_URL)

    def test_rejects_invalid_values(self) -> None:
        for overrides in (
            {"DATABASE_URL": "mysql://localhost/db"},
            {"APP_BASE_URL": "ftp://api.example"},
            {"THANK_YOU_URL": "picketly.example/thanks"},
            {"MAGIC_LINK_EXPIRY": "soon"},
            {"RATE_IP_MAX": 0},
            {"RATE_EMAIL_COOLDOWN_SEC": -1},
            {"MAX_BODY_BYTES": 0},
            {"APP_ENV": "staging"},
        ):
            with self.subTest(overrides=overrides), self.assertRaises(ValidationError):
                make_settings(**overrides)

    def test_trailing_slash_trimmed(self) -> None:
        self.assertEqual(
            make_settings(APP_BASE_URL="https://api.example/").APP_BASE_URL, "https://api.example"
        )

    def test_cookie_secure_only_in_prod(self) -> None:
        self.assertFalse(make_settings(APP_ENV="dev").cookie_secure)
        self.assertTrue(make_settings(APP_ENV="prod").cookie_secure)

    def test_relative_catalog_path_resolves_from_project_root(self) -> None:
        self.assertEqual(
            make_settings().opportunities_file, PROJECT_ROOT / "data" / "opportunities.json"
        )

    def test_settings_are_immutable(self) -> None:
        settings = make_settings()
        with self.assertRaises(ValidationError):
            settings.RATE_IP_MAX = 1


if __name__ == "__main__":
    unittest.main()

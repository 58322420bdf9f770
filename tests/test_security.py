"""Unit tests for app.core.security: magic-link and session tokens."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt
from starlette.responses import Response

from app.core.errors import ConfigurationError, TokenError
from app.core.security import (
    create_magic_link_token,
    create_session_token,
    decode_magic_link_token,
    decode_session_token,
    set_session_cookie,
)
from tests.support import TEST_SECRET, make_settings


def _forge(claims: dict, secret: str = TEST_SECRET, expires_in: timedelta = timedelta(hours=1)) -> str:
    now = datetime.now(UTC)
    return jwt.encode({**claims, "iat": now, "exp": now + expires_in}, secret, algorithm="HS256")


class TestMagicLinkToken(unittest.TestCase):
    """Magic-link tokens carry {userId, promiseId} and fail uniformly."""

    def setUp(self) -> None:
        self.settings = make_settings()

    def test_round_trip_claims(self) -> None:
        token = create_magic_link_token(self.settings, user_id=7, promise_id=11)
        claims = decode_magic_link_token(self.settings, token)
        self.assertEqual(claims.user_id, 7)
        self.assertEqual(claims.promise_id, 11)

    def test_expiry_follows_setting(self) -> None:
        settings = make_settings(MAGIC_LINK_EXPIRY="15m")
        token = create_magic_link_token(settings, user_id=1, promise_id=2)
        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["exp"] - payload["iat"], 15 * 60)

    def test_failures_share_one_message(self) -> None:
        good = create_magic_link_token(self.settings, user_id=1, promise_id=2)
        other = create_magic_link_token(self.settings, user_id=1, promise_id=3)
        bad_tokens = {
            "wrong_signature": _forge(
                {"typ": "magic_link", "userId": 1, "promiseId": 2}, secret="other-secret"
            ),
            "expired": _forge(
                {"typ": "magic_link", "userId": 1, "promiseId": 2},
                expires_in=timedelta(seconds=-5),
            ),
            "tampered": ".".join(good.split(".")[:2] + [other.split(".")[2]]),
            "session_token": create_session_token(self.settings, user_id=1),
            "missing_promise": _forge({"typ": "magic_link", "userId": 1}),
            "garbage": "not-a-jwt",
        }
        for name, token in bad_tokens.items():
            with self.subTest(case=name):
                with self.assertRaises(TokenError) as ctx:
                    decode_magic_link_token(self.settings, token)
                self.assertEqual(ctx.exception.message, "Invalid or expired token.")
                self.assertEqual(ctx.exception.status_code, 400)

    def test_missing_secret_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            create_magic_link_token(make_settings(JWT_SECRET=None), user_id=1, promise_id=2)


class TestSessionToken(unittest.TestCase):
    """decode_session_token returns None instead of raising."""

    def setUp(self) -> None:
        self.settings = make_settings()

    def test_valid_session(self) -> None:
        viewer = decode_session_token(self.settings, create_session_token(self.settings, user_id=5))
        self.assertIsNotNone(viewer)
        self.assertEqual(viewer.user_id, 5)

    def test_session_lasts_thirty_days(self) -> None:
        token = create_session_token(self.settings, user_id=5)
        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
        self.assertEqual(payload["exp"] - payload["iat"], 30 * 24 * 60 * 60)

    def test_absent_or_invalid_is_anonymous(self) -> None:
        for token in (
            None,
            "",
            "garbage",
            _forge({"typ": "session", "userId": 5}, secret="other-secret"),
            _forge({"typ": "session", "userId": 5}, expires_in=timedelta(seconds=-5)),
            create_magic_link_token(self.settings, user_id=5, promise_id=1),
        ):
            with self.subTest(token=token):
                self.assertIsNone(decode_session_token(self.settings, token))

    def test_missing_secret_is_anonymous(self) -> None:
        token = create_session_token(self.settings, user_id=5)
        self.assertIsNone(decode_session_token(make_settings(JWT_SECRET=None), token))


class TestSessionCookie(unittest.TestCase):
    """set_session_cookie uses http-only, SameSite=Lax and secure only in prod."""

    def _cookie_header(self, app_env: str) -> str:
        response = Response()
        set_session_cookie(response, make_settings(APP_ENV=app_env), user_id=3)
        return response.headers["set-cookie"]

    def test_dev_cookie_attributes(self) -> None:
        header = self._cookie_header("dev")
        self.assertTrue(header.startswith("picketly_session="))
        self.assertIn("HttpOnly", header)
        self.assertIn("SameSite=lax", header)
        self.assertIn("Max-Age=2592000", header)
        self.assertNotIn("Secure", header)

    def test_prod_cookie_is_secure(self) -> None:
        self.assertIn("Secure", self._cookie_header("prod"))


if __name__ == "__main__":
    unittest.main()

"""Unit tests for RateLimiter policies and the 429 envelope."""

import unittest
from unittest.mock import MagicMock

from app.core.errors import TooManyRequests
from app.core.rate_limit import RateLimiter, build_policies
from tests.helpers import API, ApiTestCase, make_settings


def _request(ip: str = "10.0.0.1", path: str = "/api/v1/auth/login") -> MagicMock:
    request = MagicMock()
    request.client.host = ip
    request.url.path = path
    return request


class TestPolicies(unittest.TestCase):
    def test_defaults(self) -> None:
        policies = build_policies(make_settings())
        self.assertEqual(policies["general"].item.amount, 15)
        self.assertEqual(policies["general"].window, "1 minute")
        self.assertEqual(policies["auth"].item.amount, 5)
        self.assertEqual(policies["auth"].window, "15 minutes")
        self.assertEqual(policies["password_reset"].item.amount, 3)
        self.assertEqual(policies["password_reset"].window, "1 hour")
        self.assertEqual(policies["strict"].item.amount, 10)
        self.assertTrue(policies["strict"].per_user)


class TestRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.limiter = RateLimiter(
            make_settings(RATE_LIMIT_ENABLED=True, RATE_LIMIT_AUTH="2 per minute", RATE_LIMIT_STRICT="1 per hour")
        )

    def test_blocks_after_limit(self) -> None:
        self.limiter.check("auth", _request())
        self.limiter.check("auth", _request())
        with self.assertRaises(TooManyRequests) as ctx:
            self.limiter.check("auth", _request())
        err = ctx.exception
        self.assertEqual(err.status_code, 429)
        self.assertEqual(err.details["limit"], 2)
        self.assertEqual(err.details["window"], "1 minute")
        self.assertEqual(err.details["ip"], "10.0.0.1")
        self.assertIn("Retry-After", err.headers)

    def test_keys_by_ip(self) -> None:
        self.limiter.check("auth", _request(ip="10.0.0.1"))
        self.limiter.check("auth", _request(ip="10.0.0.1"))
        self.limiter.check("auth", _request(ip="10.0.0.2"))

    def test_per_user_policy_keys_by_user_and_skips_admins(self) -> None:
        self.limiter.check("strict", _request(), user_id=1)
        self.limiter.check("strict", _request(), user_id=2)
        with self.assertRaises(TooManyRequests):
            self.limiter.check("strict", _request(), user_id=1)
        for _ in range(3):
            self.limiter.check("strict", _request(), user_id=3, is_admin=True)

    def test_disabled_limiter_never_blocks(self) -> None:
        limiter = RateLimiter(make_settings(RATE_LIMIT_ENABLED=False, RATE_LIMIT_AUTH="1 per hour"))
        for _ in range(5):
            limiter.check("auth", _request())


class TestRateLimitedEndpoint(ApiTestCase):
    settings_overrides = {"RATE_LIMIT_ENABLED": True, "RATE_LIMIT_AUTH": "2 per 15 minutes"}

    def test_login_returns_429_envelope(self) -> None:
        body = {"email": "nobody@acme.io", "password": "password123"}
        for _ in range(2):
            self.assertEqual(self.client.post(f"{API}/auth/login", json=body).status_code, 401)
        response = self.client.post(f"{API}/auth/login", json=body)
        self.assertEqual(response.status_code, 429)
        payload = response.json()
        self.assertFalse(payload["status"])
        self.assertEqual(payload["message"], "Too many attempts, please try again later.")
        self.assertEqual(payload["error"]["code"], "TOO_MANY_REQUESTS")
        self.assertEqual(payload["error"]["limit"], 2)
        self.assertEqual(payload["error"]["window"], "15 minutes")
        self.assertIn("Retry-After", response.headers)

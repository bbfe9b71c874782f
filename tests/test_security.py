"""Unit tests for password hashing, access tokens and reset-token generation."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from app.core.security import (
    SigningSecretMissingError,
    create_access_token,
    decode_access_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from tests.helpers import TEST_JWT_SECRET, make_settings


class TestPasswordHashing(unittest.TestCase):
    def test_hash_verifies(self) -> None:
        hashed = hash_password("correct horse", rounds=4)
        self.assertNotEqual(hashed, "correct horse")
        self.assertTrue(verify_password("correct horse", hashed))
        self.assertFalse(verify_password("wrong horse", hashed))

    def test_malformed_hash_does_not_raise(self) -> None:
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class TestAccessToken(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()

    def test_round_trip(self) -> None:
        token = create_access_token(42, True, self.settings)
        payload = decode_access_token(token, self.settings)
        self.assertEqual(payload["sub"], "42")
        self.assertIs(payload["is_admin"], True)
        self.assertIn("exp", payload)
        self.assertIn("iat", payload)

    def test_expiry_defaults_to_sixty_minutes(self) -> None:
        token = create_access_token(1, False, self.settings)
        payload = decode_access_token(token, self.settings)
        self.assertEqual(payload["exp"] - payload["iat"], 60 * 60)

    def test_expired_token_is_rejected(self) -> None:
        past = datetime.now(UTC) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "1", "iat": past, "exp": past + timedelta(minutes=1)},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token, self.settings)

    def test_wrong_secret_is_rejected(self) -> None:
        other = make_settings(JWT_SECRET="another-secret-key-with-at-least-32-bytes")
        token = create_access_token(1, False, other)
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token, self.settings)

    def test_missing_secret_is_fatal(self) -> None:
        settings = make_settings(JWT_SECRET="")
        self.assertIsNone(settings.JWT_SECRET)
        with self.assertRaises(SigningSecretMissingError):
            create_access_token(1, False, settings)


class TestResetToken(unittest.TestCase):
    def test_is_64_hex_chars_and_random(self) -> None:
        a, b = generate_reset_token(), generate_reset_token()
        self.assertEqual(len(a), 64)
        int(a, 16)
        self.assertNotEqual(a, b)

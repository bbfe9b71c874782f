"""Password hashing, JWT creation/verification and password-reset secrets."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings

# Bcrypt cost (rounds) when no settings are at hand; 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Random bytes in a password-reset token (hex-encoded to twice this length).
RESET_TOKEN_BYTES = 32


class SigningSecretMissingError(RuntimeError):
    """Raised when JWT_SECRET is not configured; tokens can be neither issued nor verified."""


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _signing_secret(settings: Settings) -> str:
    if settings.JWT_SECRET is None:
        raise SigningSecretMissingError("JWT_SECRET is not defined in environment variables")
    return settings.JWT_SECRET.get_secret_value()


def create_access_token(user_id: int, is_admin: bool, settings: Settings) -> str:
    """Create a JWT access token with sub (user id), is_admin, iat and exp."""
    secret = _signing_secret(settings)
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "is_admin": bool(is_admin),
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, is_admin, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = _signing_secret(settings)
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def generate_reset_token() -> str:
    """Return a single-use password-reset secret (not a signed token)."""
    return secrets.token_hex(RESET_TOKEN_BYTES)

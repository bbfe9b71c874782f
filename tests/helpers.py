"""Shared test helpers: an in-memory SQLite app, registration and role shortcuts."""

import unittest
from typing import Any

from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.models import User
from app.services.rbac import apply_role, get_role_by_name

API = "/api/v1"
TEST_JWT_SECRET = "test-secret-key-with-at-least-32-bytes!!"
DEFAULT_PASSWORD = "password123"


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: in-memory SQLite, fast bcrypt, limiter off unless overridden."""
    values: dict[str, Any] = {
        "_env_file": None,
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_JWT_SECRET,
        "BCRYPT_ROUNDS": 4,
        "RATE_LIMIT_ENABLED": False,
        "AUTO_CREATE_TABLES": True,
        "SMTP_HOST": None,
    }
    values.update(overrides)
    return Settings(**values)


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    """Starts a fresh app (own database and limiter state) for every test."""

    settings_overrides: dict[str, Any] = {}

    def setUp(self) -> None:
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        self.client = TestClient(self.app, raise_server_exceptions=False)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def session(self):
        return self.app.state.context.session_factory()

    def register(
        self,
        email: str = "ada@acme.io",
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Ada",
        gender: str = "female",
        **extra: Any,
    ):
        body = {
            "first_name": first_name,
            "email": email,
            "password": password,
            "gender": gender,
            **extra,
        }
        return self.client.post(f"{API}/auth/register", json=body)

    def register_token(self, email: str = "ada@acme.io", **extra: Any) -> str:
        response = self.register(email=email, **extra)
        self.assertEqual(response.status_code, 200, response.text)
        return response.headers["Authorization"].removeprefix("Bearer ")

    def user_id(self, email: str) -> int:
        with self.session() as db:
            return db.query(User).filter(User.email == email).one().id

    def set_role(self, email: str, role_name: str | None) -> None:
        with self.session() as db:
            user = db.query(User).filter(User.email == email).one()
            role = get_role_by_name(db, role_name) if role_name else None
            apply_role(user, role)
            db.commit()

    def user_with_role(self, email: str, role_name: str) -> tuple[int, str]:
        """Register email, give it role_name and return (user id, bearer token)."""
        token = self.register_token(email=email, first_name=email.split("@")[0][:50] or "User")
        self.set_role(email, role_name)
        return self.user_id(email), token

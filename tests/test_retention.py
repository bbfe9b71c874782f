"""Tests for expired reset-token purging and the retention CLI."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.orm import Session

from app import retention
from app.core.database import build_engine, build_session_factory
from app.core.security import hash_password
from app.models import Base, PasswordResetToken, User
from app.services.retention import purge_expired_reset_tokens
from tests.helpers import make_settings


class TestPurgeWithMockSession(unittest.TestCase):
    def test_deletes_and_commits(self) -> None:
        session = MagicMock(spec=Session)
        session.query.return_value.filter.return_value.delete.return_value = 2
        deleted = purge_expired_reset_tokens(session, now=datetime(2026, 1, 1, tzinfo=UTC))
        self.assertEqual(deleted, 2)
        session.query.assert_called_once_with(PasswordResetToken)
        session.query.return_value.filter.return_value.delete.assert_called_once_with(
            synchronize_session=False
        )
        session.commit.assert_called_once()


class TestPurgeWithDatabase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = build_engine(make_settings())
        Base.metadata.create_all(bind=self.engine)
        self.addCleanup(self.engine.dispose)
        self.session = build_session_factory(self.engine)()
        self.addCleanup(self.session.close)

        user = User(
            first_name="Ada",
            email="ada@acme.io",
            password_hash=hash_password("password123", rounds=4),
            gender="female",
            is_active=True,
        )
        self.session.add(user)
        self.session.flush()
        self.now = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)
        for name, minutes in (("old", -30), ("edge", 0), ("fresh", 10)):
            self.session.add(
                PasswordResetToken(
                    user_id=user.id,
                    token=name,
                    created_at=self.now + timedelta(minutes=minutes - 15),
                    expires_at=self.now + timedelta(minutes=minutes),
                )
            )
        self.session.commit()

    def test_only_expired_tokens_are_removed(self) -> None:
        self.assertEqual(purge_expired_reset_tokens(self.session, now=self.now), 2)
        remaining = [t.token for t in self.session.query(PasswordResetToken).all()]
        self.assertEqual(remaining, ["fresh"])

    def test_second_run_deletes_nothing(self) -> None:
        purge_expired_reset_tokens(self.session, now=self.now)
        self.assertEqual(purge_expired_reset_tokens(self.session, now=self.now), 0)


class TestRetentionCli(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("app.retention.get_settings", return_value=make_settings())
        patcher.start()
        self.addCleanup(patcher.stop)

    @patch("app.retention.purge_expired_reset_tokens", return_value=3)
    def test_success_exit_code(self, purge) -> None:
        self.assertEqual(retention.main(), 0)
        purge.assert_called_once()

    @patch("app.retention.purge_expired_reset_tokens", side_effect=RuntimeError("db down"))
    def test_failure_exit_code(self, _purge) -> None:
        with self.assertLogs("app.retention", level="ERROR"):
            self.assertEqual(retention.main(), 1)

"""Token retention: delete password reset tokens whose expiry has passed."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import PasswordResetToken

logger = logging.getLogger(__name__)


def purge_expired_reset_tokens(session: Session, now: datetime | None = None) -> int:
    """
    Delete reset tokens with expires_at <= now.

    Returns the number of rows deleted. Idempotent: safe to run repeatedly.
    """
    cutoff = now or datetime.now(UTC)
    deleted_count = (
        session.query(PasswordResetToken)
        .filter(PasswordResetToken.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Retention run: cutoff=%s, reset_tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count

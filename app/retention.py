"""
CLI entrypoint for the reset-token retention job. Run from cron, e.g.:

  python -m app.retention

Or every 15 minutes: */15 * * * * cd /path/to/rbac-api && .venv/bin/python -m app.retention
"""

import logging
import sys

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.services.retention import purge_expired_reset_tokens

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: delete expired password reset tokens."""
    load_dotenv()
    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        deleted = purge_expired_reset_tokens(db)
        logger.info("Retention completed: reset_tokens_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

"""
Seed master (reference) data. Existing (data_type, data_key) records are kept.

  python -m app.scripts.seed_master_data [--reset]
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.services.master_data import seed_master_data

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed master data records.")
    parser.add_argument("--reset", action="store_true", help="Delete all master data before seeding")
    args = parser.parse_args()

    load_dotenv()
    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        inserted = seed_master_data(db, reset=args.reset)
        print(f"Inserted {inserted} master data records.")
        return 0
    except Exception as e:
        logger.exception("Master data seeding failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

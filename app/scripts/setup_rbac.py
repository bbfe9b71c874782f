"""
Seed the default roles and give every role-less user the viewer role.

  python -m app.scripts.setup_rbac
  python -m app.scripts.setup_rbac --email someone@example.com --role editor
"""
import argparse
import logging
import sys

from dotenv import load_dotenv
from sqlalchemy import func, select

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.models.role import ROLE_NAMES, Role
from app.models.user import User
from app.services.rbac import (
    RoleAssignmentError,
    assign_default_roles,
    assign_role_by_email,
    seed_roles,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def _print_status(db) -> None:
    users = db.execute(select(func.count()).select_from(User)).scalar_one()
    without_role = db.execute(
        select(func.count()).select_from(User).where(User.role_id.is_(None))
    ).scalar_one()
    print(f"- Total users: {users}")
    print(f"- Users without roles: {without_role}")
    print("\nAvailable roles and permissions:")
    for role in db.execute(select(Role).order_by(Role.id)).scalars():
        state = "" if role.is_active else " (inactive)"
        print(f"\n{role.name}{state}:")
        print(f"  Description: {role.description}")
        print(f"  Permissions: {', '.join(role.permissions or [])}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed roles and assign default roles to users.")
    parser.add_argument("--email", help="Assign --role to this user only")
    parser.add_argument("--role", choices=ROLE_NAMES, help="Role to assign with --email")
    args = parser.parse_args()
    if bool(args.email) != bool(args.role):
        parser.error("--email and --role must be given together")

    load_dotenv()
    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        created = seed_roles(db)
        logger.info("Roles seeded (new: %s)", ", ".join(created) or "none")
        if args.email:
            user = assign_role_by_email(db, args.email, args.role)
            print(f"Assigned {args.role} role to user: {user.email}")
        else:
            assigned = assign_default_roles(db)
            print(f"Assigned default role to {assigned} users")
        _print_status(db)
        return 0
    except RoleAssignmentError as e:
        logger.error("%s", e)
        return 1
    except Exception as e:
        logger.exception("RBAC setup failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

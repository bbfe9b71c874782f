"""
Create an active user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD FIRST_NAME GENDER [role]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password Ada female admin
"""
import argparse
import sys

from dotenv import load_dotenv
from sqlalchemy import select

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models.role import DEFAULT_ROLE, ROLE_NAMES
from app.models.user import User
from app.services.rbac import apply_role, get_role_by_name, seed_roles


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an RBAC API user without the HTTP API.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("first_name", help="First name (2-50 chars)")
    parser.add_argument("gender", choices=["male", "female", "other"])
    parser.add_argument("role", nargs="?", default=DEFAULT_ROLE, choices=ROLE_NAMES)
    args = parser.parse_args()

    email = args.email.strip().lower()
    if "@" not in email or len(email) > 255:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    first_name = args.first_name.strip()
    if not (2 <= len(first_name) <= 50):
        print("First name must be 2-50 characters.", file=sys.stderr)
        return 1

    load_dotenv()
    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        seed_roles(db)
        existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        role = get_role_by_name(db, args.role)
        if role is None:
            print(f"Role '{args.role}' does not exist.", file=sys.stderr)
            return 1
        user = User(
            first_name=first_name,
            email=email,
            password_hash=hash_password(args.password, rounds=settings.BCRYPT_ROUNDS),
            gender=args.gender,
            is_active=True,
        )
        apply_role(user, role)
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{role.name}'.")
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

"""
Role seeding, default role assignment and permission helpers.

Permissions are "resource.action" strings stored on the role; a user's
effective permissions are those of its (active) role.
"""

import logging
import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.role import DEFAULT_ROLE, Role
from app.models.user import User

logger = logging.getLogger(__name__)

RESOURCES = ("posts", "users", "roles")
ACTIONS = ("view", "create", "update", "delete")
PERMISSION_PATTERN = re.compile(rf"^({'|'.join(RESOURCES)})\.({'|'.join(ACTIONS)})$")

SEED_ROLES: list[dict] = [
    {
        "name": "admin",
        "description": "Full access to all resources",
        "permissions": [
            "users.create",
            "users.view",
            "users.update",
            "users.delete",
            "roles.create",
            "roles.view",
            "roles.update",
            "roles.delete",
            "posts.create",
            "posts.view",
            "posts.update",
            "posts.delete",
        ],
    },
    {
        "name": "editor",
        "description": "Can read and edit content, limited user management",
        "permissions": [
            "users.view",
            "users.update",
            "roles.view",
            "posts.create",
            "posts.view",
            "posts.update",
            "posts.delete",
        ],
    },
    {
        "name": "viewer",
        "description": "Read-only access to all resources",
        "permissions": ["users.view", "roles.view", "posts.view"],
    },
]


class RoleAssignmentError(LookupError):
    """A user or role named for an assignment does not exist."""


def invalid_permissions(permissions: list[str]) -> list[str]:
    """Return the entries that are not of the form resource.action."""
    return [p for p in permissions if not PERMISSION_PATTERN.match(p)]


def permission_catalogue() -> list[dict[str, str]]:
    """Every permission the API understands, grouped posts, users, roles."""
    return [
        {
            "name": f"{resource}.{action}",
            "resource": resource,
            "action": action,
            "description": f"{action.capitalize()} {resource}",
        }
        for resource in RESOURCES
        for action in ACTIONS
    ]


def effective_permissions(role: Role | None) -> tuple[str, ...]:
    """Permissions granted by role; a missing or soft-deleted role grants none."""
    if role is None or not role.is_active:
        return ()
    return tuple(role.permissions or ())


def get_role_by_name(session: Session, name: str) -> Role | None:
    return session.execute(select(Role).where(Role.name == name)).scalar_one_or_none()


def seed_roles(session: Session) -> list[str]:
    """Create the admin/editor/viewer roles when missing. Returns names created. Idempotent."""
    created = []
    for data in SEED_ROLES:
        if get_role_by_name(session, data["name"]) is not None:
            logger.debug("Role already exists: %s", data["name"])
            continue
        session.add(
            Role(
                name=data["name"],
                description=data["description"],
                permissions=list(data["permissions"]),
            )
        )
        created.append(data["name"])
        logger.info(
            "Created role %s with %s permissions", data["name"], len(data["permissions"])
        )
    session.commit()
    return created


def apply_role(user: User, role: Role | None) -> None:
    """Set user's role and keep is_admin equal to (role is admin)."""
    user.role = role
    user.role_id = role.id if role is not None else None
    user.is_admin = role is not None and role.is_admin_role


def sync_admin_flags(session: Session, role: Role) -> int:
    """After a role rename, re-derive is_admin for every holder. Returns rows changed."""
    is_admin = role.is_admin_role
    holders = session.execute(select(User).where(User.role_id == role.id)).scalars().all()
    changed = 0
    for user in holders:
        if user.is_admin != is_admin:
            user.is_admin = is_admin
            changed += 1
    return changed


def assign_default_roles(session: Session) -> int:
    """Give the viewer role to every user without one. Returns the number of users updated."""
    viewer = get_role_by_name(session, DEFAULT_ROLE)
    if viewer is None:
        raise RoleAssignmentError(
            f"Default {DEFAULT_ROLE} role not found. Please seed RBAC first."
        )
    users = session.execute(select(User).where(User.role_id.is_(None))).scalars().all()
    for user in users:
        apply_role(user, viewer)
    session.commit()
    if users:
        logger.info("Assigned %s role to %s users", DEFAULT_ROLE, len(users))
    return len(users)


def assign_role_by_email(session: Session, email: str, role_name: str) -> User:
    """Assign role_name to the user with email. Raises RoleAssignmentError if either is missing."""
    user = session.execute(
        select(User).where(User.email == email.strip().lower())
    ).scalar_one_or_none()
    if user is None:
        raise RoleAssignmentError(f"User not found: {email}")
    role = get_role_by_name(session, role_name)
    if role is None:
        raise RoleAssignmentError(f"Role '{role_name}' not found")
    apply_role(user, role)
    session.commit()
    return user

"""Unit tests for role seeding, permission helpers and role assignment."""

import unittest

from app.core.database import build_engine, build_session_factory
from app.core.security import hash_password
from app.models import Base, Role, User
from app.services.rbac import (
    RoleAssignmentError,
    apply_role,
    assign_default_roles,
    assign_role_by_email,
    effective_permissions,
    get_role_by_name,
    invalid_permissions,
    permission_catalogue,
    seed_roles,
    sync_admin_flags,
)
from tests.helpers import make_settings


class TestPermissionHelpers(unittest.TestCase):
    def test_invalid_permissions(self) -> None:
        self.assertEqual(
            invalid_permissions(["users.view", "Users.view", "posts.publish", "roles.delete", ""]),
            ["Users.view", "posts.publish", ""],
        )

    def test_catalogue_covers_every_resource_and_action(self) -> None:
        names = [p["name"] for p in permission_catalogue()]
        self.assertEqual(len(names), 12)
        self.assertEqual(len(set(names)), 12)
        self.assertEqual(invalid_permissions(names), [])

    def test_effective_permissions(self) -> None:
        role = Role(name="viewer", permissions=["posts.view"], is_active=True)
        self.assertEqual(effective_permissions(role), ("posts.view",))
        role.is_active = False
        self.assertEqual(effective_permissions(role), ())
        self.assertEqual(effective_permissions(None), ())


class RbacDatabaseTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = build_engine(make_settings())
        Base.metadata.create_all(bind=self.engine)
        self.addCleanup(self.engine.dispose)
        self.session = build_session_factory(self.engine)()
        self.addCleanup(self.session.close)

    def add_user(self, email: str) -> User:
        user = User(
            first_name="Test",
            email=email,
            password_hash=hash_password("password123", rounds=4),
            gender="other",
            is_active=True,
        )
        self.session.add(user)
        self.session.commit()
        return user


class TestSeedRoles(RbacDatabaseTestCase):
    def test_seed_is_idempotent(self) -> None:
        self.assertEqual(seed_roles(self.session), ["admin", "editor", "viewer"])
        self.assertEqual(seed_roles(self.session), [])
        self.assertEqual(self.session.query(Role).count(), 3)
        self.assertEqual(len(get_role_by_name(self.session, "admin").permissions), 12)


class TestRoleAssignment(RbacDatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        seed_roles(self.session)

    def test_apply_role_tracks_admin_flag(self) -> None:
        user = self.add_user("ada@acme.io")
        apply_role(user, get_role_by_name(self.session, "admin"))
        self.assertTrue(user.is_admin)
        self.assertEqual(user.role_name, "admin")
        apply_role(user, get_role_by_name(self.session, "editor"))
        self.assertFalse(user.is_admin)
        apply_role(user, None)
        self.assertIsNone(user.role_id)
        self.assertIsNone(user.role_name)

    def test_sync_admin_flags_after_rename(self) -> None:
        user = self.add_user("ada@acme.io")
        admin = get_role_by_name(self.session, "admin")
        apply_role(user, admin)
        self.session.commit()

        admin.name = "super_admin"
        self.assertEqual(sync_admin_flags(self.session, admin), 1)
        self.assertFalse(user.is_admin)
        self.assertEqual(sync_admin_flags(self.session, admin), 0)

    def test_assign_default_roles(self) -> None:
        self.add_user("ada@acme.io")
        self.add_user("bob@acme.io")
        self.assertEqual(assign_default_roles(self.session), 2)
        self.assertEqual(assign_default_roles(self.session), 0)
        self.assertEqual(
            {u.role_name for u in self.session.query(User).all()}, {"viewer"}
        )

    def test_assign_role_by_email(self) -> None:
        self.add_user("ada@acme.io")
        user = assign_role_by_email(self.session, " ADA@acme.io ", "admin")
        self.assertTrue(user.is_admin)
        with self.assertRaises(RoleAssignmentError):
            assign_role_by_email(self.session, "ghost@acme.io", "admin")
        with self.assertRaises(RoleAssignmentError):
            assign_role_by_email(self.session, "ada@acme.io", "owner")


class TestAssignDefaultRolesWithoutSeed(RbacDatabaseTestCase):
    def test_missing_viewer_role(self) -> None:
        with self.assertRaises(RoleAssignmentError):
            assign_default_roles(self.session)

"""Authentication and permission checks shared by every protected route."""

from app.core.security import create_access_token
from app.models import Role, User
from app.services.rbac import get_role_by_name
from tests.helpers import API, ApiTestCase, auth_headers, make_settings


class TestAuthentication(ApiTestCase):
    def _error(self, response) -> dict:
        self.assertEqual(response.status_code, 401, response.text)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")
        return response.json()["error"]

    def test_missing_header(self) -> None:
        error = self._error(self.client.get(f"{API}/users/profile/me"))
        self.assertEqual(error["code"], "TOKEN_NOT_FOUND")

    def test_non_bearer_scheme(self) -> None:
        response = self.client.get(
            f"{API}/users/profile/me", headers={"Authorization": "Basic dXNlcjpwYXNz"}
        )
        self.assertEqual(self._error(response)["code"], "TOKEN_NOT_FOUND")

    def test_garbage_token(self) -> None:
        response = self.client.get(f"{API}/users/profile/me", headers=auth_headers("not.a.jwt"))
        self.assertEqual(self._error(response)["code"], "AUTHENTICATION_FAILED")

    def test_token_signed_with_another_secret(self) -> None:
        self.register()
        other = make_settings(JWT_SECRET="another-secret-key-with-32-bytes-or-more")
        token = create_access_token(self.user_id("ada@acme.io"), False, other)
        response = self.client.get(f"{API}/users/profile/me", headers=auth_headers(token))
        self.assertEqual(self._error(response)["code"], "AUTHENTICATION_FAILED")

    def test_token_for_deleted_user(self) -> None:
        token = create_access_token(999, False, self.settings)
        response = self.client.get(f"{API}/users/profile/me", headers=auth_headers(token))
        self.assertEqual(self._error(response)["code"], "AUTHENTICATION_FAILED")

    def test_deactivated_user_is_rejected_immediately(self) -> None:
        token = self.register_token()
        self.assertEqual(
            self.client.get(f"{API}/users/profile/me", headers=auth_headers(token)).status_code,
            200,
        )
        with self.session() as db:
            db.query(User).update({User.is_active: False})
            db.commit()
        response = self.client.get(f"{API}/users/profile/me", headers=auth_headers(token))
        self.assertEqual(self._error(response)["code"], "AUTHENTICATION_FAILED")


class TestPermissionChecks(ApiTestCase):
    def test_viewer_cannot_create_posts(self) -> None:
        token = self.register_token()
        response = self.client.post(
            f"{API}/posts/", json={"title": "Hello", "content": "World"}, headers=auth_headers(token)
        )
        self.assertEqual(response.status_code, 403)
        error = response.json()["error"]
        self.assertEqual(error["code"], "INSUFFICIENT_PERMISSIONS")
        self.assertEqual(error["requiredPermission"], "posts.create")
        self.assertEqual(
            sorted(error["userPermissions"]), ["posts.view", "roles.view", "users.view"]
        )

    def test_role_change_applies_to_existing_token(self) -> None:
        token = self.register_token()
        self.set_role("ada@acme.io", "editor")
        response = self.client.post(
            f"{API}/posts/", json={"title": "Hello", "content": "World"}, headers=auth_headers(token)
        )
        self.assertEqual(response.status_code, 201, response.text)

    def test_user_without_role_has_no_permissions(self) -> None:
        token = self.register_token()
        self.set_role("ada@acme.io", None)
        response = self.client.get(f"{API}/users/", headers=auth_headers(token))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["userPermissions"], [])

    def test_soft_deleted_role_grants_nothing(self) -> None:
        token = self.register_token()
        with self.session() as db:
            get_role_by_name(db, "viewer").is_active = False
            db.commit()
        response = self.client.get(f"{API}/users/", headers=auth_headers(token))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["userPermissions"], [])

    def test_master_data_needs_only_authentication(self) -> None:
        token = self.register_token()
        self.set_role("ada@acme.io", None)
        response = self.client.get(f"{API}/master-data/", headers=auth_headers(token))
        self.assertEqual(response.status_code, 200, response.text)

    def test_validation_runs_before_authentication(self) -> None:
        response = self.client.get(f"{API}/users/abc")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["errors"][0]["field"], "params.id")

    def test_seeded_roles_exist(self) -> None:
        with self.session() as db:
            names = {r.name for r in db.query(Role).all()}
        self.assertEqual(names, {"admin", "editor", "viewer"})

"""API tests for /master-data."""

from app.models import MasterData
from app.services.master_data import seed_master_data
from tests.helpers import API, ApiTestCase, auth_headers


class TestMasterDataEmpty(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = auth_headers(self.register_token())

    def test_requires_authentication(self) -> None:
        self.assertEqual(self.client.get(f"{API}/master-data/").status_code, 401)

    def test_sync_without_data_is_503(self) -> None:
        response = self.client.post(f"{API}/master-data/sync", headers=self.headers)
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"]["code"], "MASTER_DATA_SYNC_FAILED")

    def test_unknown_type_is_404(self) -> None:
        response = self.client.get(f"{API}/master-data/roles", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "MASTER_DATA_NOT_FOUND")


class TestMasterData(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = auth_headers(self.register_token())
        with self.session() as db:
            seed_master_data(db)

    def test_grouped_listing(self) -> None:
        response = self.client.get(f"{API}/master-data/", headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()["data"]
        self.assertEqual(data["total_records"], 12)
        self.assertEqual(
            sorted(data["master_data"]), ["configurations", "modules", "permissions", "roles"]
        )
        admin = data["master_data"]["roles"]["admin"]
        self.assertEqual(admin["name"], "Administrator")
        self.assertEqual(admin["version"], 1)
        self.assertIn("last_updated", data)

    def test_filters(self) -> None:
        with self.session() as db:
            db.query(MasterData).filter(MasterData.data_key == "guest").update({MasterData.is_active: False})
            db.commit()

        response = self.client.get(
            f"{API}/master-data/?data_type=roles&is_active=true", headers=self.headers
        )
        roles = response.json()["data"]["master_data"]["roles"]
        self.assertEqual(sorted(roles), ["admin", "user"])

        response = self.client.get(f"{API}/master-data/roles?is_active=false", headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()["data"]
        self.assertEqual(data["data_type"], "roles")
        self.assertEqual(list(data["data"]), ["guest"])
        self.assertEqual(data["total_records"], 1)

    def test_invalid_data_type_filter(self) -> None:
        response = self.client.get(f"{API}/master-data/?data_type=colours", headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["errors"][0]["field"], "query.data_type")

    def test_sync_bumps_versions_of_active_records(self) -> None:
        with self.session() as db:
            db.query(MasterData).filter(MasterData.data_key == "guest").update({MasterData.is_active: False})
            db.commit()

        response = self.client.post(f"{API}/master-data/sync", headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()["data"]
        self.assertEqual(data["sync_status"], "success")
        self.assertEqual(data["total_records"], 11)
        self.assertEqual(data["master_data"]["roles"]["admin"]["version"], 2)
        self.assertNotIn("guest", data["master_data"]["roles"])

        with self.session() as db:
            guest = db.query(MasterData).filter(MasterData.data_key == "guest").one()
            self.assertEqual(guest.version, 1)

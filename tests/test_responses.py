"""Unit tests for the response envelope, pagination flags and error logging."""

import unittest

from app.core.responses import envelope, pagination_flags
from app.models import Log
from tests.helpers import API, ApiTestCase


class TestEnvelope(unittest.TestCase):
    def test_success_carries_data(self) -> None:
        body = envelope(200, "ok", data={"a": 1})
        self.assertEqual(body, {"status": True, "status_code": 200, "message": "ok", "data": {"a": 1}})

    def test_error_carries_error(self) -> None:
        body = envelope(404, "missing", error={"code": "NOT_FOUND"})
        self.assertFalse(body["status"])
        self.assertNotIn("data", body)
        self.assertEqual(body["error"], {"code": "NOT_FOUND"})

    def test_status_follows_status_code(self) -> None:
        self.assertTrue(envelope(399, "m")["status"])
        self.assertFalse(envelope(400, "m")["status"])


class TestPaginationFlags(unittest.TestCase):
    def test_first_page_of_many(self) -> None:
        self.assertEqual(pagination_flags(1, 10, 25), (True, False))

    def test_middle_page(self) -> None:
        self.assertEqual(pagination_flags(2, 10, 25), (True, True))

    def test_last_page(self) -> None:
        self.assertEqual(pagination_flags(3, 10, 25), (False, True))

    def test_exact_fit(self) -> None:
        self.assertEqual(pagination_flags(1, 10, 10), (False, False))


class TestErrorLogging(ApiTestCase):
    def test_error_response_writes_log_row(self) -> None:
        response = self.client.get(f"{API}/users/")
        self.assertEqual(response.status_code, 401)
        with self.session() as db:
            logs = db.query(Log).all()
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].level, "error")
        self.assertEqual(logs[0].message, "Authorization token not found")
        self.assertEqual(logs[0].meta["endpoint"], f"{API}/users/")
        self.assertEqual(logs[0].meta["method"], "GET")

    def test_unknown_route_uses_envelope(self) -> None:
        response = self.client.get(f"{API}/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")
        self.assertFalse(response.json()["status"])

import os
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.main import app, cors_origins
from roster.config import DEFAULT_CONFIG
from roster.store import MemoryTableStore
from tests.fixtures import source_grid, source_row


class TestApi(unittest.TestCase):
    def setUp(self):
        self.store = MemoryTableStore(
            {"Fall Export": source_grid(source_row("MATH-5", "Mathematics", "S100", "Lee", "Ana", 5, 88))}
        )
        patchers = [
            patch("api.main.get_store", return_value=self.store),
            patch("api.main.get_config", return_value=DEFAULT_CONFIG),
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)
        self.client = TestClient(app)

    def test_meta_seasons(self):
        resp = self.client.get("/meta/seasons")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([s["key"] for s in resp.json()["seasons"]], ["fall", "winter", "spring"])

    def test_refresh_one_then_preview(self):
        resp = self.client.post("/seasons/fall/refresh")
        self.assertEqual(resp.json()["level"], "success")
        preview = self.client.get("/tables/Fall Math").json()
        self.assertEqual(preview["header"][-1], "Fall Percentile")
        self.assertEqual(preview["rows"], [["S100", "Lee", "Ana", "Mathematics", 5, 88]])

    def test_refresh_all_returns_alert_per_season(self):
        body = self.client.post("/seasons/refresh").json()
        self.assertEqual([a["level"] for a in body["alerts"]], ["success", "error", "error"])

    def test_rebuild_and_export(self):
        self.client.post("/seasons/fall/refresh")
        self.assertEqual(self.client.post("/combined/rebuild").json()["rows_written"], 1)
        resp = self.client.get("/export/Combined")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.text.startswith("First Name,Last Name,Student ID"))

    def test_missing_table_is_404(self):
        self.assertEqual(self.client.get("/tables/Nope").status_code, 404)
        self.assertEqual(self.client.get("/export/Nope").status_code, 404)

    def test_summary(self):
        resp = self.client.get("/summary")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["kpis"]["records"], 0)

    def test_unexpected_failure_is_500(self):
        with patch("api.main.refresh_all_seasons", side_effect=RuntimeError("boom")):
            resp = self.client.post("/seasons/refresh")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "boom", "type": "RuntimeError"})

    def test_no_cors_headers_without_configured_origins(self):
        resp = self.client.get("/meta/seasons", headers={"Origin": "http://localhost:3000"})
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("access-control-allow-origin", resp.headers)

    def test_cors_origins_from_environment(self):
        with patch.dict(os.environ, {"ROSTER_CORS_ORIGINS": " https://a.example , ,https://b.example"}):
            self.assertEqual(cors_origins(), ["https://a.example", "https://b.example"])
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(cors_origins(), [])


if __name__ == "__main__":
    unittest.main()

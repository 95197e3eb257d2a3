"""Tests for the HTTP API."""
import sqlite3

import pytest

from quiz_api.app import READ_ONLY_MSG
from quiz_pipeline.cache import QuestionCache

from .conftest import base_question


class BrokenMetrics:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise sqlite3.OperationalError("database is locked")
        return fail


class TestReadEndpoints:
    def test_years(self, client):
        resp = client.get("/api/years")
        assert resp.status_code == 200
        assert resp.get_json() == [
            {"_id": "2020", "year": "2020", "description": "Quiz Year 2020"},
            {"_id": "2019", "year": "2019", "description": "Quiz Year 2019"},
        ]

    def test_questions_for_year(self, client):
        data = client.get("/api/questions/2020").get_json()
        assert [q["id"] for q in data] == ["1", "3"]
        assert data[0]["options"] == {"A": "Water", "B": "Salt", "C": "Sugar", "D": "Air"}
        assert data[0]["tags"] == ["General Science", "Chemistry"]

    def test_questions_tag_filter_is_substring(self, client):
        data = client.get("/api/questions/2020?tags=science").get_json()
        assert [q["id"] for q in data] == ["1"]

    def test_tag_endpoint_is_exact(self, client):
        assert client.get("/api/tags/science").get_json() == []
        data = client.get("/api/tags/GENERAL%20SCIENCE").get_json()
        assert [q["id"] for q in data] == ["1"]

    def test_reads_share_cache(self, client, feed):
        client.get("/api/years")
        client.get("/api/questions/2020")
        client.get("/api/tags/History")
        assert feed.calls == 1

    def test_no_data_maps_to_500(self, client, feed):
        feed.fail = True
        resp = client.get("/api/years")
        assert resp.status_code == 500
        assert "sheet unreachable" in resp.get_json()["error"]


class TestRefresh:
    def test_refresh_forces_fetch(self, client, feed):
        client.get("/api/years")
        resp = client.post("/api/refresh")
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "count": 4, "message": "Data refreshed from Sheets"}
        assert feed.calls == 2

    def test_refresh_failure(self, client, feed):
        feed.fail = True
        resp = client.post("/api/refresh")
        assert resp.status_code == 500
        assert resp.get_json()["error"].startswith("Failed to refresh data: ")

    def test_refresh_serves_base_when_sheet_down(self, metrics, public_dir, feed):
        from quiz_api.app import create_app

        feed.fail = True
        cache = QuestionCache(fetch_feed=feed, load_base=lambda: [base_question()])
        client = create_app(cache=cache, metrics=metrics, public_dir=public_dir).test_client()
        resp = client.post("/api/refresh")
        assert resp.get_json()["count"] == 1
        assert client.get("/api/years").get_json()[0]["year"] == "2018"

    def test_refresh_records_metrics(self, client, metrics):
        client.post("/api/refresh")
        summary = metrics.get_summary()
        assert summary["timing_stats"]["refresh_duration_ms"]["count"] == 1
        assert summary["gauges"]["dataset_size"] == 4
        assert metrics.get_recent_events("refresh")[0]["data"] == "remote"

    def test_refresh_survives_metrics_failure(self, cache, public_dir):
        from quiz_api.app import create_app

        client = create_app(cache=cache, metrics=BrokenMetrics(), public_dir=public_dir).test_client()
        resp = client.post("/api/refresh")
        assert resp.status_code == 200
        assert resp.get_json()["count"] == 4


class TestAdmin:
    def test_login_ok(self, client):
        resp = client.post("/api/admin/login", json={"username": "admin", "password": "password123"})
        assert resp.get_json() == {"success": True, "token": "token-admin"}

    def test_login_bad_credentials(self, client):
        resp = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "error": "Invalid credentials"}

    def test_login_without_body(self, client):
        assert client.post("/api/admin/login").status_code == 401

    def test_login_with_non_object_body(self, client):
        resp = client.post("/api/admin/login", json=["admin"])
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "error": "Invalid credentials"}

    @pytest.mark.parametrize("path", [
        "/api/admin/verify-json",
        "/api/admin/import-json",
        "/api/admin/clear-questions",
    ])
    def test_write_endpoints_are_read_only(self, client, auth_headers, path):
        resp = client.post(path, headers=auth_headers, json={})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": READ_ONLY_MSG}

    @pytest.mark.parametrize("path", ["/api/admin/import-json", "/api/admin/stats"])
    def test_admin_routes_require_token(self, client, path):
        method = client.post if "import" in path else client.get
        resp = method(path, headers={"Authorization": "token-someone"})
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Unauthorized"}

    def test_stats_counts_visits(self, client, auth_headers):
        client.get("/")
        client.get("/api/years")
        stats = client.get("/api/admin/stats", headers=auth_headers).get_json()
        # the stats request itself is an /api/ visit
        assert stats["total"] == 3
        assert stats["sessions"] == 1
        assert stats["lastReset"]

    def test_metrics_summary(self, client, auth_headers):
        resp = client.get("/api/admin/metrics", headers=auth_headers)
        assert resp.status_code == 200
        assert "counters" in resp.get_json()


class TestMisc:
    def test_index_served_from_public(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"Quiz" in resp.data

    def test_index_missing(self, cache, metrics, tmp_path):
        from quiz_api.app import create_app

        client = create_app(cache=cache, metrics=metrics, public_dir=tmp_path / "empty").test_client()
        assert client.get("/").status_code == 404

    def test_health_reports_cache(self, client):
        client.get("/api/years")
        body = client.get("/api/health").get_json()
        assert body["status"] == "ok"
        assert body["cache"]["count"] == 4
        assert body["cache"]["source"] == "remote"

    def test_cors_header(self, client):
        resp = client.get("/api/health", headers={"Origin": "http://example.com"})
        assert resp.headers.get("Access-Control-Allow-Origin") == "*"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

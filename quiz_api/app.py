"""
Quiz Sheet API - read-only JSON API over the merged quiz dataset.

Usage:
    quiz-api                      # serves on $PORT (default 3000)
    flask --app quiz_api.app:create_app run

Optional: put QUIZ_SHEET_CSV_URL, ADMIN_USERNAME, ADMIN_PASSWORD in .env.
"""
import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS

# Load .env before quiz_pipeline.config reads the environment
_root = Path(__file__).resolve().parent.parent
load_dotenv(_root / ".env")

from quiz_pipeline.cache import QuestionCache, get_cache
from quiz_pipeline.config import PUBLIC_DIR
from quiz_pipeline.errors import QuizDataError
from quiz_pipeline.query import list_years, questions_for_tag, questions_for_year
from quiz_pipeline.schemas import Question

from .auth import Unauthorized, admin_credentials, check_login, require_auth
from .observability import MetricsCollector, get_metrics
from .observability.metrics import SESSIONS_COUNTER, VISITS_COUNTER

logger = logging.getLogger(__name__)

READ_ONLY_MSG = "Database is now managed via Google Sheets. Is read only mode."
PAGE_PATHS = ("/", "/index.html")


def _questions_json(questions: Iterable[Question]):
    return jsonify([q.to_dict() for q in questions])


def create_app(
    cache: Optional[QuestionCache] = None,
    metrics: Optional[MetricsCollector] = None,
    public_dir: Optional[Path] = None,
) -> Flask:
    """Build the Flask app; cache and metrics default to the process-wide instances."""
    public_dir = Path(public_dir or PUBLIC_DIR)
    app = Flask(__name__, static_folder=str(public_dir), static_url_path="")
    app.config["ADMIN_CREDENTIALS"] = admin_credentials()
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    def _cache() -> QuestionCache:
        return cache if cache is not None else get_cache()

    def _metrics() -> MetricsCollector:
        return metrics if metrics is not None else get_metrics()

    @app.before_request
    def track_visit():
        logger.info("%s %s", request.method, request.full_path.rstrip("?"))
        if request.path in PAGE_PATHS or request.path.startswith("/api/"):
            try:
                _metrics().increment(VISITS_COUNTER)
                if request.path in PAGE_PATHS:
                    _metrics().increment(SESSIONS_COUNTER)
            except sqlite3.Error as e:
                logger.error("Error logging visit: %s", e)

    @app.errorhandler(Unauthorized)
    def handle_unauthorized(e):
        return jsonify({"error": str(e)}), 401

    @app.errorhandler(QuizDataError)
    def handle_data_error(e):
        try:
            _metrics().increment("errors_total")
            _metrics().event("error", str(e))
        except sqlite3.Error as metrics_error:
            logger.error("Error recording failure: %s", metrics_error)
        return jsonify({"error": str(e)}), 500

    @app.get("/")
    def index():
        if (public_dir / "index.html").is_file():
            return send_from_directory(public_dir, "index.html")
        return jsonify({"error": "index.html not found"}), 404

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "cache": _cache().stats()})

    @app.post("/api/refresh")
    def refresh():
        started = time.perf_counter()
        try:
            data = _cache().get_questions(force_refresh=True)
        except QuizDataError as e:
            try:
                _metrics().event("refresh", f"failed: {e}")
            except sqlite3.Error as metrics_error:
                logger.error("Error recording refresh: %s", metrics_error)
            return jsonify({"error": f"Failed to refresh data: {e}"}), 500
        try:
            _metrics().timing("refresh_duration_ms", (time.perf_counter() - started) * 1000)
            _metrics().event("refresh", _cache().stats()["source"])
            _metrics().gauge("dataset_size", len(data))
        except sqlite3.Error as e:
            logger.error("Error recording refresh: %s", e)
        return jsonify({"success": True, "count": len(data), "message": "Data refreshed from Sheets"})

    @app.get("/api/years")
    def years():
        return jsonify(list_years(_cache().get_questions()))

    @app.get("/api/questions/<year>")
    def questions_by_year(year):
        tags = request.args.get("tags")
        return _questions_json(questions_for_year(_cache().get_questions(), year, tags))

    @app.get("/api/tags/<tag>")
    def questions_by_tag(tag):
        return _questions_json(questions_for_tag(_cache().get_questions(), tag))

    @app.post("/api/admin/login")
    def admin_login():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = {}
        try:
            token = check_login(body.get("username"), body.get("password"))
        except Unauthorized as e:
            return jsonify({"success": False, "error": str(e)}), 401
        return jsonify({"success": True, "token": token})

    @app.post("/api/admin/verify-json")
    @app.post("/api/admin/import-json")
    @app.post("/api/admin/clear-questions")
    @require_auth
    def admin_read_only():
        return jsonify({"error": READ_ONLY_MSG}), 400

    @app.get("/api/admin/stats")
    @require_auth
    def admin_stats():
        try:
            return jsonify(_metrics().visit_stats())
        except sqlite3.Error as e:
            logger.error("Error loading stats: %s", e)
            return jsonify({"error": "Failed to load stats"}), 500

    @app.get("/api/admin/metrics")
    @require_auth
    def admin_metrics():
        return jsonify(_metrics().get_summary())

    return app


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    metrics = get_metrics()
    metrics.gauge("app_last_start", time.time())
    metrics.increment("app_starts_total")
    metrics.cleanup_old_data()

    port = int(os.getenv("PORT", "3000"))
    app = create_app(metrics=metrics)
    logger.info("Data source: Google Sheets. Server running on port %d", port)

    try:
        get_cache().get_questions()
    except QuizDataError as e:
        logger.error("Initial fetch failed: %s", e)

    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    main()

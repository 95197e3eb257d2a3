"""
Persistent metrics collector using SQLite.

Visit counters and refresh timings survive restarts because they're stored
in a separate SQLite database file.

Usage:
    from quiz_api.observability import get_metrics

    metrics = get_metrics()
    metrics.increment("visits_total")
    metrics.gauge("dataset_size", 120)
    metrics.timing("refresh_duration_ms", 150)
    metrics.event("refresh", "remote")
    metrics.visit_stats()   # {"total", "sessions", "lastReset"}
"""
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import METRICS_CONFIG

VISITS_COUNTER = "visits_total"
SESSIONS_COUNTER = "sessions_total"

SCHEMA = [
    "CREATE TABLE IF NOT EXISTS counters (name TEXT PRIMARY KEY, value INTEGER DEFAULT 0, updated_at TEXT)",
    "CREATE TABLE IF NOT EXISTS gauges (name TEXT PRIMARY KEY, value REAL, updated_at TEXT)",
    """CREATE TABLE IF NOT EXISTS timings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        value REAL NOT NULL,
        recorded_at TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_type TEXT NOT NULL,
        event_data TEXT,
        recorded_at TEXT NOT NULL
    )""",
    "CREATE TABLE IF NOT EXISTS meta (key TEXT PRIMARY KEY, value TEXT)",
    "CREATE INDEX IF NOT EXISTS idx_timings_name ON timings(name)",
    "CREATE INDEX IF NOT EXISTS idx_events_type ON events(event_type)",
]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class MetricsCollector:
    """Thread-safe, persistent metrics collector backed by SQLite."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else METRICS_CONFIG["db_path"]()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        """Create tables and stamp lastReset the first time the file is used."""
        with self._get_conn() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.execute("INSERT OR IGNORE INTO meta (key, value) VALUES ('last_reset', ?)", (_utcnow(),))
            conn.commit()

    @contextmanager
    def _get_conn(self):
        """Get a database connection with WAL mode for concurrent access."""
        conn = sqlite3.connect(str(self.db_path), timeout=10)
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()

    def _execute(self, sql: str, params: Sequence[Any] = ()):
        with self._lock:
            with self._get_conn() as conn:
                conn.execute(sql, params)
                conn.commit()

    def _fetchone(self, sql: str, params: Sequence[Any] = ()):
        with self._get_conn() as conn:
            return conn.execute(sql, params).fetchone()

    def increment(self, name: str, value: int = 1) -> int:
        """Increment a counter, return new value."""
        now = _utcnow()
        self._execute(
            "INSERT INTO counters (name, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(name) DO UPDATE SET value = value + excluded.value, updated_at = excluded.updated_at",
            (name, value, now),
        )
        return self.get_counter(name)

    def gauge(self, name: str, value: float):
        self._execute(
            "INSERT INTO gauges (name, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (name, value, _utcnow()),
        )

    def timing(self, name: str, value_ms: float):
        self._execute(
            "INSERT INTO timings (name, value, recorded_at) VALUES (?, ?, ?)",
            (name, value_ms, _utcnow()),
        )

    def event(self, event_type: str, data: Optional[str] = None):
        self._execute(
            "INSERT INTO events (event_type, event_data, recorded_at) VALUES (?, ?, ?)",
            (event_type, data, _utcnow()),
        )

    def get_counter(self, name: str) -> int:
        row = self._fetchone("SELECT value FROM counters WHERE name = ?", (name,))
        return row[0] if row else 0

    def get_timing_stats(self, name: str, hours: int = 24) -> Dict[str, Any]:
        """Get timing statistics for the last N hours."""
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
        count, avg, low, high = self._fetchone(
            "SELECT COUNT(*), AVG(value), MIN(value), MAX(value) FROM timings "
            "WHERE name = ? AND recorded_at > ?",
            (name, cutoff),
        )
        return {
            "count": count,
            "avg_ms": round(avg, 2) if avg else 0,
            "min_ms": round(low, 2) if low else 0,
            "max_ms": round(high, 2) if high else 0,
        }

    def get_recent_events(self, event_type: Optional[str] = None, limit: int = 100) -> List[Dict]:
        """Get recent events, newest first."""
        sql = "SELECT event_type, event_data, recorded_at FROM events"
        params: List[Any] = []
        if event_type:
            sql += " WHERE event_type = ?"
            params.append(event_type)
        sql += " ORDER BY id DESC LIMIT ?"
        params.append(limit)
        with self._get_conn() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [{"type": t, "data": d, "recorded_at": at} for t, d, at in rows]

    def visit_stats(self) -> Dict[str, Any]:
        """Visit counters in the {total, sessions, lastReset} shape the admin page reads."""
        row = self._fetchone("SELECT value FROM meta WHERE key = 'last_reset'")
        return {
            "total": self.get_counter(VISITS_COUNTER),
            "sessions": self.get_counter(SESSIONS_COUNTER),
            "lastReset": row[0] if row else None,
        }

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._get_conn() as conn:
            counters = dict(conn.execute("SELECT name, value FROM counters").fetchall())
            gauges = dict(conn.execute("SELECT name, value FROM gauges").fetchall())
        return {
            "counters": counters,
            "gauges": gauges,
            "timing_stats": {
                "refresh_duration_ms": self.get_timing_stats("refresh_duration_ms"),
            },
            "recent_events": self.get_recent_events(limit=10),
            "recent_events_count": len(self.get_recent_events(limit=METRICS_CONFIG["recent_events_limit"])),
        }

    def cleanup_old_data(self, days: Optional[int] = None):
        """Remove timings and events older than the retention window."""
        days = days or METRICS_CONFIG["retention_days"]
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        with self._lock:
            with self._get_conn() as conn:
                conn.execute("DELETE FROM timings WHERE recorded_at < ?", (cutoff,))
                conn.execute("DELETE FROM events WHERE recorded_at < ?", (cutoff,))
                conn.commit()


# Singleton instance
_metrics_instance: Optional[MetricsCollector] = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """Get the global metrics collector instance."""
    global _metrics_instance
    if _metrics_instance is None:
        with _metrics_lock:
            if _metrics_instance is None:
                _metrics_instance = MetricsCollector()
    return _metrics_instance

"""Observability configuration."""
from quiz_pipeline.config import get_metrics_path

METRICS_CONFIG = {
    "db_path": get_metrics_path,
    "retention_days": 30,
    "recent_events_limit": 1000,
}

"""Quiz Sheet API: Flask layer over the quiz data pipeline."""
from .app import create_app

__all__ = ["create_app"]

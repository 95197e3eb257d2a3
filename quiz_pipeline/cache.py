"""
In-memory TTL cache for the merged quiz dataset.

One slot holds the current dataset and the time it was committed. Reads inside
the TTL are served from memory; anything else refreshes: load the local base
data, fetch the sheet, normalize and merge. When the sheet is unavailable the
base data (or, failing that, the stale slot) is served instead.

Usage:
    from quiz_pipeline.cache import get_cache

    questions = get_cache().get_questions()
    questions = get_cache().get_questions(force_refresh=True)
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .config import CACHE_TTL_SECONDS, FETCH_TIMEOUT, SHEET_CSV_URL, get_base_data_path
from .errors import FetchError, LocalReadError, ParseError
from .schemas import Dataset, Question
from .source import fetch_sheet_csv, load_base_dataset, parse_feed
from .stages import merge_questions, merge_stats, normalize_frame

logger = logging.getLogger(__name__)


class QuestionCache:
    """Owns the cached dataset and decides when to go back to the sheet."""

    def __init__(
        self,
        fetch_feed: Callable[[], str],
        load_base: Callable[[], List[Question]],
        clock: Callable[[], float] = time.monotonic,
        ttl_seconds: float = CACHE_TTL_SECONDS,
    ):
        self.fetch_feed = fetch_feed
        self.load_base = load_base
        self.clock = clock
        self.ttl_seconds = ttl_seconds

        self._data: Optional[Dataset] = None
        self._fetched_at: Optional[float] = None
        self._source: Optional[str] = None
        self._last_error: Optional[str] = None
        self._last_stats: Dict[str, Any] = {}
        self._refresh_lock = threading.Lock()

    def _is_fresh(self, now: float) -> bool:
        return (
            self._data is not None
            and self._fetched_at is not None
            and now - self._fetched_at < self.ttl_seconds
        )

    def get_questions(self, force_refresh: bool = False) -> Dataset:
        """
        Return the current dataset, refreshing it when stale or forced.

        Raises:
            FetchError: Only when the sheet failed and neither base data nor a
                previously cached dataset is available
        """
        if not force_refresh and self._is_fresh(self.clock()):
            return self._data

        with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if not force_refresh and self._is_fresh(self.clock()):
                return self._data
            return self._refresh()

    def _refresh(self) -> Dataset:
        now = self.clock()

        logger.info("Loading base data...")
        try:
            base = self.load_base()
        except LocalReadError as e:
            logger.error("Error reading base data: %s", e)
            base = []

        logger.info("Fetching fresh data from sheet...")
        try:
            df = parse_feed(self.fetch_feed())
            incoming, normalize_stats = normalize_frame(df)
            merged = merge_questions(base, incoming)
        except (FetchError, ParseError) as e:
            logger.error("Error fetching/parsing sheet data: %s", e)
            self._last_error = str(e)
            if base:
                logger.info("Using local base data despite sheet fetch error.")
                self._commit(base, now, source="base")
                return base
            if self._data is not None:
                logger.warning("Returning stale cache due to fetch error.")
                self._source = "stale"
                return self._data
            raise FetchError(str(e)) from e

        self._last_error = None
        self._last_stats = {
            "normalize": normalize_stats,
            "merge": merge_stats(base, incoming, merged),
        }
        self._commit(merged, now, source="remote")
        logger.info("Merged sheet data. Total questions: %d", len(merged))
        return merged

    def _commit(self, data: Dataset, now: float, source: str):
        self._data = data
        self._fetched_at = now
        self._source = source

    def invalidate(self):
        """Force the next read to refresh; the current data stays as fallback."""
        with self._refresh_lock:
            self._fetched_at = None

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        age = None
        if self._fetched_at is not None:
            age = round(self.clock() - self._fetched_at, 3)
        return {
            "populated": self._data is not None,
            "count": len(self._data) if self._data is not None else 0,
            "source": self._source,
            "fetched_at_age_seconds": age,
            "ttl_seconds": self.ttl_seconds,
            "last_error": self._last_error,
            "last_refresh": self._last_stats,
        }


def default_cache() -> QuestionCache:
    """Cache wired to the configured sheet URL and base data file."""
    base_path = get_base_data_path()
    return QuestionCache(
        fetch_feed=lambda: fetch_sheet_csv(SHEET_CSV_URL, timeout=FETCH_TIMEOUT),
        load_base=lambda: load_base_dataset(base_path),
    )


# Singleton instance
_cache_instance: Optional[QuestionCache] = None
_cache_lock = threading.Lock()


def get_cache() -> QuestionCache:
    """Get the process-wide question cache."""
    global _cache_instance
    if _cache_instance is None:
        with _cache_lock:
            if _cache_instance is None:
                _cache_instance = default_cache()
    return _cache_instance

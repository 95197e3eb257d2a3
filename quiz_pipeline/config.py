"""Quiz pipeline configuration."""
import os
from pathlib import Path
from typing import Optional

PIPELINE_ROOT = Path(__file__).parent.parent
DATA_DIR = PIPELINE_ROOT / "data"
CACHE_DIR = DATA_DIR / "cache"
PUBLIC_DIR = PIPELINE_ROOT / "public"

BASE_DATA_NAME = "data.json"
METRICS_DB_NAME = "metrics.db"

# Published Google Sheet (File > Share > Publish to web > CSV)
DEFAULT_SHEET_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vS2XBDgArRwbSDeYrFOS4gj3pwWafbCV8_RHGd3v9tb_9S35ApQEzG43pvR6KX-zHaiucsQ0iXClaI0"
    "/pub?output=csv"
)
SHEET_CSV_URL = os.getenv("QUIZ_SHEET_CSV_URL", DEFAULT_SHEET_CSV_URL)


def _env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    """Read a float setting; unset or malformed values give `default`."""
    val = (os.getenv(name) or "").strip()
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        return default


CACHE_TTL_SECONDS = _env_float("QUIZ_CACHE_TTL", 300.0)

# None leaves the timeout to requests (no timeout)
FETCH_TIMEOUT = _env_float("QUIZ_FETCH_TIMEOUT")

OPTION_KEYS = ("A", "B", "C", "D")
TAG_SEPARATOR = "|"

# Canonical field -> accepted sheet headers (compared after strip().lower())
FIELD_ALIASES = {
    "id": ["id"],
    "year": ["year"],
    "question_text": ["question_text", "questiontext"],
    "option_a": ["option_a"],
    "option_b": ["option_b"],
    "option_c": ["option_c"],
    "option_d": ["option_d"],
    "correct_answer": ["correct_answer", "correctanswer"],
    "explanation": ["explanation"],
    "tags": ["tags"],
}

STAGE_NAMES = ["01_load_base", "02_fetch", "03_normalize", "04_merge"]


def ensure_dirs():
    """Create necessary directories."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    CACHE_DIR.mkdir(parents=True, exist_ok=True)


def get_base_data_path() -> Path:
    override = os.getenv("QUIZ_BASE_DATA")
    if override:
        return Path(override).expanduser()
    return DATA_DIR / BASE_DATA_NAME


def get_metrics_path() -> Path:
    ensure_dirs()
    return CACHE_DIR / METRICS_DB_NAME

"""Data sources: the published sheet (CSV over HTTP) and the local base file."""
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import requests

from .config import FETCH_TIMEOUT, SHEET_CSV_URL, get_base_data_path
from .errors import FetchError, LocalReadError, ParseError
from .schemas import Question
from .stages import validate_questions

logger = logging.getLogger(__name__)


def fetch_sheet_csv(url: str = SHEET_CSV_URL, timeout: Optional[float] = FETCH_TIMEOUT) -> str:
    """
    Download the sheet's CSV export.

    Raises:
        FetchError: On connection problems or a non-2xx response
    """
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"Could not reach sheet: {e}") from e
    if not response.ok:
        raise FetchError(
            f"Sheet request failed with status {response.status_code}",
            status_code=response.status_code,
        )
    return response.text


def parse_feed(text: str) -> pd.DataFrame:
    """
    Parse CSV text with a header row. Every column is read as a string and
    blank lines are skipped; an empty body yields an empty frame.

    Raises:
        ParseError: If the body is not a valid delimited table
    """
    if not text or not text.strip():
        return pd.DataFrame()
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="error",
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Invalid CSV from sheet: {e}") from e
    # Rows wider than the header make pandas promote the extra leading
    # fields to an implicit index.
    if not isinstance(df.index, pd.RangeIndex):
        raise ParseError("Invalid CSV from sheet: rows have more fields than the header")
    return df


def load_base_dataset(path: Union[str, Path, None] = None) -> List[Question]:
    """
    Load the local base dataset (JSON array of Question-shaped objects).

    Raises:
        LocalReadError: If the file is missing, unreadable or not a JSON array
    """
    filepath = Path(path) if path is not None else get_base_data_path()
    if not filepath.is_file():
        raise LocalReadError(f"Base data file not found: {filepath}")
    try:
        with open(filepath, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise LocalReadError(f"Error reading base data {filepath}: {e}") from e
    if not isinstance(raw, list):
        raise LocalReadError(f"Base data must be a JSON array, got {type(raw).__name__}")

    questions = [Question.from_dict(item) for item in raw if isinstance(item, dict)]
    valid, quarantine, stats = validate_questions(questions)
    for issue in stats["issues"]:
        logger.warning("Base data %s: %s", filepath.name, issue)
    return valid


def save_dataset(questions: List[Question], path: Union[str, Path]) -> Dict[str, Any]:
    """Write a dataset as a JSON array in the same shape load_base_dataset reads."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump([q.to_dict() for q in questions], f, indent=2, ensure_ascii=False)
    return {"ok": True, "rows": len(questions), "path": str(out_path)}

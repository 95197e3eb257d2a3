"""Stage 3: Normalize sheet rows into canonical Question records."""
import pandas as pd
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import FIELD_ALIASES, OPTION_KEYS, TAG_SEPARATOR
from ..schemas import Question, clean_cell, parse_year, split_tags


def _resolve_keys(columns) -> Dict[str, Optional[Any]]:
    """Map each canonical field to the first column whose header matches an alias."""
    resolved: Dict[str, Optional[Any]] = {}
    for canonical, aliases in FIELD_ALIASES.items():
        resolved[canonical] = next(
            (col for col in columns if str(col).strip().lower() in aliases),
            None,
        )
    return resolved


def _build_question(row: Mapping[str, Any], keys: Mapping[str, Optional[Any]]) -> Question:
    def get_field(name: str) -> str:
        key = keys.get(name)
        return clean_cell(row.get(key)) if key is not None else ""

    return Question(
        id=get_field("id").strip(),
        year=parse_year(get_field("year")),
        question_text=get_field("question_text"),
        options={key: get_field(f"option_{key.lower()}") for key in OPTION_KEYS},
        correct_answer=get_field("correct_answer").strip().upper(),
        explanation=get_field("explanation"),
        tags=split_tags(get_field("tags"), TAG_SEPARATOR),
    )


def normalize_row(row: Mapping[str, Any]) -> Question:
    """
    Convert one raw sheet row into a Question.

    Header matching is case- and whitespace-insensitive against FIELD_ALIASES;
    missing or malformed fields fall back to zero values, never raising.
    """
    return _build_question(row, _resolve_keys(list(row.keys())))


def normalize_frame(df: pd.DataFrame) -> Tuple[List[Question], Dict[str, Any]]:
    """
    Normalize every row of the parsed sheet.

    Rows without a resolvable id cannot take part in the merge and are dropped.

    Returns:
        - questions: Normalized questions in sheet order
        - stats: Normalization statistics
    """
    stats = {
        "rows_in": len(df),
        "rows_dropped_no_id": 0,
        "columns_matched": [],
    }

    keys = _resolve_keys(list(df.columns))
    stats["columns_matched"] = [name for name, col in keys.items() if col is not None]

    questions = []
    for row in df.to_dict(orient="records"):
        question = _build_question(row, keys)
        if not question.id:
            stats["rows_dropped_no_id"] += 1
            continue
        questions.append(question)

    stats["rows_out"] = len(questions)
    return questions, stats

"""Read-side filters over the merged dataset."""
from typing import Dict, Iterable, List, Optional

from .schemas import Question


def list_years(questions: Iterable[Question]) -> List[Dict[str, str]]:
    """Distinct non-zero years, newest first, in the shape the year picker expects."""
    years = sorted({q.year for q in questions if q.year}, reverse=True)
    return [
        {"_id": str(year), "year": str(year), "description": f"Quiz Year {year}"}
        for year in years
    ]


def questions_for_year(
    questions: Iterable[Question],
    year: str,
    tag_filter: Optional[str] = None,
) -> List[Question]:
    """
    Questions whose year equals `year` as a string.

    `tag_filter` is a comma-separated list; a question is kept when any of its
    tags contains any of the terms, case-insensitively (substring match).
    """
    filtered = [q for q in questions if str(q.year) == str(year)]
    if tag_filter:
        terms = [t.strip().lower() for t in tag_filter.split(",")]
        filtered = [
            q for q in filtered
            if any(term in tag.lower() for tag in q.tags for term in terms)
        ]
    return filtered


def questions_for_tag(questions: Iterable[Question], tag: str) -> List[Question]:
    """Questions carrying `tag` exactly, ignoring case."""
    wanted = tag.lower()
    return [q for q in questions if any(t.lower() == wanted for t in q.tags)]

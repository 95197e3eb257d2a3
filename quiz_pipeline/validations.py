"""
Validations for a merged quiz dataset.

Each validation returns a dict: {"name", "passed", "message", "details"}.
Run via scripts/run_validations.py for a clear report.
"""
from collections import Counter
from typing import Any, Dict, List, Sequence

from .config import OPTION_KEYS
from .schemas import Question


def validation_non_empty(questions: Sequence[Question], min_rows: int = 1) -> Dict[str, Any]:
    """Check that the dataset has at least min_rows questions."""
    count = len(questions)
    passed = count >= min_rows
    return {
        "name": "dataset_min_rows",
        "passed": passed,
        "message": f"Row count {count} >= {min_rows}" if passed else f"Row count {count} < {min_rows}",
        "details": {"rows": count, "min_required": min_rows},
    }


def validation_unique_ids(questions: Sequence[Question]) -> Dict[str, Any]:
    """Check that every question has an id and no id repeats."""
    counts = Counter(str(q.id) for q in questions)
    missing = counts.pop("", 0)
    dupes = sorted(qid for qid, n in counts.items() if n > 1)
    passed = not missing and not dupes
    return {
        "name": "unique_ids",
        "passed": passed,
        "message": "All ids present and unique" if passed else f"{missing} missing, {len(dupes)} duplicated",
        "details": {"missing": missing, "duplicates": dupes[:20]},
    }


def validation_options_complete(questions: Sequence[Question]) -> Dict[str, Any]:
    """Check that options carry exactly the keys A-D."""
    bad = [q.id for q in questions if set(q.options) != set(OPTION_KEYS)]
    return {
        "name": "options_complete",
        "passed": not bad,
        "message": "All questions have options A-D" if not bad else f"{len(bad)} questions with bad option keys",
        "details": {"ids": bad[:20]},
    }


def validation_tags_clean(questions: Sequence[Question]) -> Dict[str, Any]:
    """Check that tags is a list of non-empty trimmed strings."""
    bad = [
        q.id for q in questions
        if not isinstance(q.tags, list) or any(not t or t != t.strip() for t in q.tags)
    ]
    return {
        "name": "tags_clean",
        "passed": not bad,
        "message": "Tags clean" if not bad else f"{len(bad)} questions with malformed tags",
        "details": {"ids": bad[:20]},
    }


def validation_years(questions: Sequence[Question]) -> Dict[str, Any]:
    """Check years are non-negative and report how many are unset (0)."""
    negative = [q.id for q in questions if q.year < 0]
    unset = sum(1 for q in questions if q.year == 0)
    return {
        "name": "years_valid",
        "passed": not negative,
        "message": f"Years valid ({unset} unset)" if not negative else f"{len(negative)} negative years",
        "details": {"negative": negative[:20], "unset": unset},
    }


def validation_answers(questions: Sequence[Question]) -> Dict[str, Any]:
    """Check that correct_answer names one of the option letters."""
    bad = [q.id for q in questions if q.correct_answer not in OPTION_KEYS]
    return {
        "name": "answers_valid",
        "passed": not bad,
        "message": "All answers are A-D" if not bad else f"{len(bad)} questions with answer outside A-D",
        "details": {"ids": bad[:20]},
    }


def run_all_validations(questions: Sequence[Question], min_rows: int = 1) -> List[Dict[str, Any]]:
    """Run all validation checks. Returns list of result dicts."""
    validators = [
        validation_unique_ids,
        validation_options_complete,
        validation_tags_clean,
        validation_years,
        validation_answers,
    ]
    results = [validation_non_empty(questions, min_rows=min_rows)]
    for v in validators:
        results.append(v(questions))
    return results

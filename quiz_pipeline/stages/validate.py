"""Stage 1: Validate the local base dataset (ids, duplicates)."""
from collections import Counter
from typing import Any, Dict, List, Tuple

from ..schemas import Question


def validate_questions(questions: List[Question]) -> Tuple[List[Question], List[Question], Dict[str, Any]]:
    """
    Validate base questions.

    Entries without an id are quarantined. Duplicate ids are reported but
    kept; the merge resolves them (last entry wins, first position kept).

    Returns:
        - valid: Questions that passed validation
        - quarantine: Questions that failed validation
        - stats: Validation statistics
    """
    stats = {
        "rows_in": len(questions),
        "rows_valid": 0,
        "rows_quarantined": 0,
        "issues": []
    }

    valid = [q for q in questions if q.id]
    quarantine = [q for q in questions if not q.id]
    if quarantine:
        stats["issues"].append(f"Quarantined {len(quarantine)} entries without id")

    dupes = sorted(qid for qid, n in Counter(q.id for q in valid).items() if n > 1)
    if dupes:
        stats["issues"].append(f"Duplicate ids: {dupes}")

    stats["rows_valid"] = len(valid)
    stats["rows_quarantined"] = len(quarantine)
    return valid, quarantine, stats

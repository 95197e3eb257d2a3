"""Stage 4: Merge sheet questions into the base dataset."""
from typing import Any, Dict, Iterable, List, Sequence

from ..schemas import Dataset, Question, QuestionPatch


def merge_questions(base: Iterable[Question], incoming: Iterable[Question]) -> Dataset:
    """
    Reconcile the base dataset with freshly fetched questions, keyed by id.

    Existing ids are filled in field by field: a value only replaces the base
    value when the sheet actually supplied it, so a blank cell never blanks out
    base data. Unknown ids are appended as new questions. Base order is kept,
    new ids follow in incoming order. Neither input is mutated.
    """
    merged: Dict[str, Question] = {}
    for question in base:
        if question is None or question.id is None or str(question.id) == "":
            continue
        merged[str(question.id)] = question

    for question in incoming:
        if question is None or question.id is None or str(question.id) == "":
            continue
        key = str(question.id)
        existing = merged.get(key)
        if existing is not None:
            merged[key] = QuestionPatch.from_question(question).apply_to(existing)
        else:
            merged[key] = question

    return list(merged.values())


def merge_stats(
    base: Sequence[Question],
    incoming: Sequence[Question],
    merged: Sequence[Question],
) -> Dict[str, Any]:
    """Counts describing one merge, for pipeline summaries."""
    base_ids = {str(q.id) for q in base if q.id}
    incoming_ids: List[str] = [str(q.id) for q in incoming if q.id]
    return {
        "base_count": len(base),
        "incoming_count": len(incoming),
        "updated": len(base_ids.intersection(incoming_ids)),
        "added": len(set(incoming_ids) - base_ids),
        "rows_out": len(merged),
    }

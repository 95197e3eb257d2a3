"""Data schemas for the quiz dataset."""
import math
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from .config import OPTION_KEYS

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def empty_options() -> Dict[str, str]:
    return {key: "" for key in OPTION_KEYS}


def clean_cell(value: Any) -> str:
    """Coerce a raw cell (str, number, None, NaN) to a string; missing -> ""."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def parse_year(value: Any) -> int:
    """Leading integer of value; non-numeric, missing or negative -> 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    match = _LEADING_INT.match(clean_cell(value))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def split_tags(value: Any, separator: str = "|") -> List[str]:
    return [t.strip() for t in clean_cell(value).split(separator) if t.strip()]


@dataclass
class Question:
    """One quiz question in canonical shape."""
    id: str
    year: int = 0
    question_text: str = ""
    options: Dict[str, str] = field(default_factory=empty_options)
    correct_answer: str = ""
    explanation: str = ""
    tags: List[str] = field(default_factory=list)

    def copy(self) -> "Question":
        """Copy with its own options dict and tags list."""
        return replace(self, options=dict(self.options), tags=list(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "year": self.year,
            "question_text": self.question_text,
            "options": {key: self.options.get(key, "") for key in OPTION_KEYS},
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Question":
        """Build from a Question-shaped object (e.g. an entry of data.json).

        Missing keys get zero values; `options` always ends up with A-D and
        `tags` accepts either a list or a "|"-separated string.
        """
        raw_options = data.get("options") or {}
        if not isinstance(raw_options, Mapping):
            raw_options = {}
        options = {key: clean_cell(raw_options.get(key)) for key in OPTION_KEYS}

        raw_tags = data.get("tags")
        if isinstance(raw_tags, (list, tuple)):
            tags = [str(t).strip() for t in raw_tags if t is not None and str(t).strip()]
        else:
            tags = split_tags(raw_tags)

        return cls(
            id=clean_cell(data.get("id")).strip(),
            year=parse_year(data.get("year")),
            question_text=clean_cell(data.get("question_text")),
            options=options,
            correct_answer=clean_cell(data.get("correct_answer")).strip().upper(),
            explanation=clean_cell(data.get("explanation")),
            tags=tags,
        )


@dataclass(frozen=True)
class QuestionPatch:
    """Fields supplied by an incoming record; None means "not supplied"."""
    id: str
    year: Optional[int] = None
    question_text: Optional[str] = None
    options: Mapping[str, Optional[str]] = field(default_factory=dict)
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    tags: Optional[List[str]] = None

    @classmethod
    def from_question(cls, question: Question) -> "QuestionPatch":
        # A blank sheet cell is indistinguishable from an omitted one
        return cls(
            id=question.id,
            year=question.year or None,
            question_text=question.question_text or None,
            options={key: question.options.get(key) or None for key in OPTION_KEYS},
            correct_answer=question.correct_answer or None,
            explanation=question.explanation or None,
            tags=list(question.tags) if question.tags else None,
        )

    def apply_to(self, existing: Question) -> Question:
        merged = existing.copy()
        if self.question_text is not None:
            merged.question_text = self.question_text
        if self.year is not None:
            merged.year = self.year
        if self.correct_answer is not None:
            merged.correct_answer = self.correct_answer
        if self.explanation is not None:
            merged.explanation = self.explanation
        if self.tags is not None:
            merged.tags = list(self.tags)
        for key in OPTION_KEYS:
            value = self.options.get(key)
            if value is not None:
                merged.options[key] = value
        return merged


Dataset = List[Question]

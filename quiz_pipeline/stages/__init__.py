"""Pipeline stages."""
from .validate import validate_questions
from .normalize import normalize_row, normalize_frame
from .merge import merge_questions, merge_stats

__all__ = ["validate_questions", "normalize_row", "normalize_frame", "merge_questions", "merge_stats"]

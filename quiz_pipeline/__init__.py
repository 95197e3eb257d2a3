"""Quiz data pipeline: published sheet + local base data → merged, cached dataset."""
from .schemas import Question, QuestionPatch, Dataset
from .errors import QuizDataError, FetchError, ParseError, LocalReadError
from .cache import QuestionCache, get_cache
from .query import list_years, questions_for_year, questions_for_tag

__all__ = [
    "Question",
    "QuestionPatch",
    "Dataset",
    "QuizDataError",
    "FetchError",
    "ParseError",
    "LocalReadError",
    "QuestionCache",
    "get_cache",
    "list_years",
    "questions_for_year",
    "questions_for_tag",
]

"""Error kinds raised by the quiz data pipeline."""
from typing import Optional


class QuizDataError(Exception):
    """Base class for pipeline errors surfaced to callers."""


class FetchError(QuizDataError):
    """Remote sheet unreachable, non-2xx, or no usable data by any path."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(QuizDataError):
    """Feed body is not a valid delimited table."""


class LocalReadError(QuizDataError):
    """Base dataset file missing or malformed."""

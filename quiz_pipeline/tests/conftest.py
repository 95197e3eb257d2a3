"""Shared fixtures: sample questions, a sheet CSV, and fakes for the cache."""
import pytest

from quiz_pipeline.errors import FetchError
from quiz_pipeline.schemas import Question


SHEET_CSV = (
    "ID,Year,QuestionText,Option_A,Option_B,Option_C,Option_D,CorrectAnswer,Explanation,Tags\n"
    "1,2020,What is H2O?,Water,Salt,Sugar,Air, a ,,Chemistry | General Science\n"
    "3,2021,Largest planet?,Mars,Jupiter,Venus,Earth,b,Gas giant,Astronomy\n"
    ",2019,Orphan row,,,,,A,,\n"
)


def make_question(qid, year=2020, text="Q", answer="A", explanation="", tags=None, options=None):
    return Question(
        id=str(qid),
        year=year,
        question_text=text,
        options=options or {"A": "a", "B": "b", "C": "c", "D": "d"},
        correct_answer=answer,
        explanation=explanation,
        tags=list(tags or []),
    )


@pytest.fixture
def base_questions():
    return [
        make_question(1, 2020, "Water formula?", "A", "H two O", ["Chemistry"]),
        make_question(2, 2019, "Speed of light?", "C", "About 3e8 m/s", ["Physics", "General Science"]),
    ]


@pytest.fixture
def sheet_csv():
    return SHEET_CSV


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeFeed:
    """Callable returning CSV text, or raising FetchError when failing."""

    def __init__(self, text="", fail=False):
        self.text = text
        self.fail = fail
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.fail:
            raise FetchError("sheet unreachable")
        return self.text


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def feed(sheet_csv):
    return FakeFeed(sheet_csv)

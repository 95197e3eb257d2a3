"""Flask app wired to an in-memory cache and a throwaway metrics database."""
import pytest

from quiz_api.app import create_app
from quiz_api.observability import MetricsCollector
from quiz_pipeline.cache import QuestionCache
from quiz_pipeline.errors import FetchError, LocalReadError
from quiz_pipeline.schemas import Question

SHEET_CSV = (
    "id,year,question_text,option_a,option_b,option_c,option_d,correct_answer,explanation,tags\n"
    "1,2020,What is H2O?,Water,Salt,Sugar,Air,A,,General Science|Chemistry\n"
    "2,2019,First president?,Adams,Washington,Lincoln,Jefferson,B,,History\n"
    "3,2020,2+2?,3,4,5,6,B,,Maths\n"
    "4,0,Undated,a,b,c,d,A,,\n"
)


class Feed:
    def __init__(self, text=SHEET_CSV):
        self.text = text
        self.fail = False
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.fail:
            raise FetchError("sheet unreachable")
        return self.text


def _no_base():
    raise LocalReadError("no base data")


@pytest.fixture
def feed():
    return Feed()


@pytest.fixture
def cache(feed):
    return QuestionCache(fetch_feed=feed, load_base=_no_base)


@pytest.fixture
def metrics(tmp_path):
    return MetricsCollector(db_path=tmp_path / "metrics.db")


@pytest.fixture
def public_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    (path / "index.html").write_text("<h1>Quiz</h1>")
    return path


@pytest.fixture
def app(cache, metrics, public_dir, monkeypatch):
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "password123")
    flask_app = create_app(cache=cache, metrics=metrics, public_dir=public_dir)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": "token-admin"}


def base_question(qid="9"):
    return Question(id=qid, year=2018, question_text="From base", correct_answer="A")

import json
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time by the db session and routers.
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("GEMINI_API_KEY", None)

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quizgen.db.models import progress, quiz  # noqa: E402,F401
from quizgen.db.session import Base  # noqa: E402


def build_questions(
    count: int = 3,
    options_per_question: int = 4,
    correct_per_question: int = 1,
) -> list[dict]:
    letters = "ABCDEFG"
    questions = []
    for number in range(1, count + 1):
        options = [
            {
                "letter": letters[i],
                "text": f"Option {letters[i]} for question {number}",
                "isCorrect": i < correct_per_question,
            }
            for i in range(options_per_question)
        ]
        questions.append(
            {
                "questionNumber": number,
                "questionText": f"What does concept {number} describe?",
                "options": options,
            }
        )
    return questions


class FakeCompletionClient:
    """Returns canned completion text and records every prompt."""

    def __init__(self, response: str):
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


@pytest.fixture
def make_questions():
    return build_questions


@pytest.fixture
def completion_client():
    def _factory(questions=None, raw: str | None = None) -> FakeCompletionClient:
        if raw is None:
            raw = json.dumps({"questions": build_questions() if questions is None else questions})
        return FakeCompletionClient(raw)

    return _factory


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

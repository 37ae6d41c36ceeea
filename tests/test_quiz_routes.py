import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select, text

from quizgen.api.routes import quiz as quiz_routes
from quizgen.db.models.quiz import QuizQuestion
from quizgen.db.repositories.quiz_repo import QuizRepository
from quizgen.db.session import get_db
from quizgen.main import app
from quizgen.services.quiz_generator_service import QuizGeneratorService

GENERATE_BODY = {
    "materialId": 42,
    "topicId": 7,
    "materialTitle": "Photosynthesis",
    "materialContent": "Plants turn light into chemical energy.",
}


@pytest.fixture
def client(session_factory, completion_client):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fake = completion_client()
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[quiz_routes.get_quiz_service] = lambda: QuizGeneratorService(
        quiz_repo=QuizRepository(), llm_client=fake
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_fetch_before_generation_is_404(client):
    resp = client.get("/api/quiz/game/42")

    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "Quiz not generated yet"


def test_generate_then_fetch_hides_correctness(client):
    resp = client.post("/api/quiz/generate", json=GENERATE_BODY)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["alreadyExists"] is False
    assert len(body["questions"]) == 3
    assert all("isCorrect" in opt for opt in body["questions"][0]["options"])

    fetched = client.get("/api/quiz/game/42").json()
    assert fetched["materialId"] == 42
    assert [q["questionNumber"] for q in fetched["questions"]] == [1, 2, 3]
    for question in fetched["questions"]:
        assert [opt["letter"] for opt in question["options"]] == ["A", "B", "C", "D"]
        for opt in question["options"]:
            assert set(opt) == {"id", "letter", "text"}


def test_second_generate_reports_existing(client, session_factory):
    client.post("/api/quiz/generate", json=GENERATE_BODY)
    resp = client.post("/api/quiz/generate", json=GENERATE_BODY)

    assert resp.status_code == 200
    assert resp.json()["alreadyExists"] is True
    assert resp.json()["message"] == "Questions already exist"
    with session_factory() as session:
        assert session.execute(select(func.count()).select_from(QuizQuestion)).scalar_one() == 3


@pytest.mark.parametrize("missing", ["materialId", "topicId", "materialTitle", "materialContent"])
def test_generate_missing_field_is_400(client, missing):
    body = {k: v for k, v in GENERATE_BODY.items() if k != missing}

    resp = client.post("/api/quiz/generate", json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Missing required fields"


def test_generate_contract_violation_is_502(client, completion_client):
    bad = completion_client(raw='{"questions": []}')
    app.dependency_overrides[quiz_routes.get_quiz_service] = lambda: QuizGeneratorService(
        quiz_repo=QuizRepository(), llm_client=bad
    )

    resp = client.post("/api/quiz/generate", json=GENERATE_BODY)

    assert resp.status_code == 502
    assert client.get("/api/quiz/game/42").status_code == 404


def test_generate_without_gateway_is_503(client):
    app.dependency_overrides[quiz_routes.get_quiz_service] = lambda: QuizGeneratorService(
        quiz_repo=QuizRepository(), llm_client=None
    )

    resp = client.post("/api/quiz/generate", json=GENERATE_BODY)

    assert resp.status_code == 503
    assert "not configured" in resp.json()["detail"]["details"]


def test_submit_answer(client, session_factory):
    client.post("/api/quiz/generate", json=GENERATE_BODY)
    with session_factory() as session:
        question = QuizRepository().list_for_material(session, 42)[0]
        correct = next(opt for opt in question.options if opt.is_correct)
        question_id, correct_id = question.id, correct.id

    resp = client.post(
        "/api/quiz/game/42",
        json={"userId": "u-1", "questionId": question_id, "selectedOptionId": correct_id},
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "isCorrect": True, "correctOptionId": correct_id, "xpEarned": 5}


def test_submit_answer_unknown_question(client):
    resp = client.post("/api/quiz/game/42", json={"userId": "u-1", "questionId": 1, "selectedOptionId": 1})

    assert resp.status_code == 404


def test_material_lookup(client, session_factory):
    with session_factory() as session:
        session.execute(
            text("CREATE TABLE IF NOT EXISTS materials (id INTEGER PRIMARY KEY, title TEXT, content TEXT, topic_id INTEGER)")
        )
        session.execute(
            text("INSERT INTO materials (id, title, content, topic_id) VALUES (42, 'Photosynthesis', 'Light...', 7)")
        )
        session.commit()

    resp = client.get("/api/materials", params={"materialId": 42})
    missing = client.get("/api/materials", params={"materialId": 43})

    assert resp.status_code == 200
    assert resp.json()["materials"] == [{"id": 42, "title": "Photosynthesis", "content": "Light...", "topicId": 7}]
    assert missing.status_code == 404

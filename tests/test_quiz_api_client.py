import asyncio
import json

import httpx
import pytest

from quizgen.play.quiz_api_client import QuizApiClient, QuizApiError

QUESTIONS = [
    {
        "id": n,
        "materialId": 42,
        "topicId": 7,
        "questionNumber": n,
        "questionText": f"Q{n}?",
        "options": [{"id": n * 10 + i, "letter": letter, "text": letter} for i, letter in enumerate("ABCD")],
    }
    for n in (1, 2, 3)
]


def _client(handler) -> QuizApiClient:
    transport = httpx.MockTransport(handler)
    return QuizApiClient("http://quiz.test", client=httpx.AsyncClient(base_url="http://quiz.test", transport=transport))


def _run(coro_factory, handler):
    async def scenario():
        async with _client(handler) as api:
            return await coro_factory(api)

    return asyncio.run(scenario())


def test_fetch_questions_parses_player_view():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/quiz/game/42"
        return httpx.Response(200, json={"success": True, "materialId": 42, "questions": QUESTIONS})

    questions = _run(lambda api: api.fetch_questions(42), handler)

    assert [q.question_number for q in questions] == [1, 2, 3]
    assert questions[0].options[0].id == 10


def test_fetch_questions_not_found_is_none():
    def handler(request):
        return httpx.Response(404, json={"detail": {"error": "Quiz not generated yet", "details": "none"}})

    assert _run(lambda api: api.fetch_questions(42), handler) is None


def test_fetch_questions_server_error():
    def handler(request):
        return httpx.Response(500, json={"detail": {"error": "boom", "details": "database down"}})

    with pytest.raises(QuizApiError) as excinfo:
        _run(lambda api: api.fetch_questions(42), handler)

    assert str(excinfo.value) == "database down"
    assert excinfo.value.status_code == 500


def test_generate_sends_camel_case_body():
    seen = {}

    def handler(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "alreadyExists": True, "message": "Questions already exist"})

    data = _run(
        lambda api: api.generate(material_id=42, topic_id=7, title="T", content="C"),
        handler,
    )

    assert seen == {"materialId": 42, "topicId": 7, "materialTitle": "T", "materialContent": "C"}
    assert data["alreadyExists"] is True


def test_generate_error_surfaces_details():
    def handler(request):
        return httpx.Response(502, json={"detail": {"error": "AI returned an invalid quiz", "details": "expected 3"}})

    with pytest.raises(QuizApiError, match="expected 3"):
        _run(lambda api: api.generate(material_id=42, topic_id=7, title="T", content="C"), handler)


def test_submit_answer():
    def handler(request):
        assert request.method == "POST"
        assert json.loads(request.content) == {"userId": "u-1", "questionId": 1, "selectedOptionId": 10}
        return httpx.Response(200, json={"success": True, "isCorrect": True, "correctOptionId": 10, "xpEarned": 5})

    result = _run(
        lambda api: api.submit_answer(material_id=42, user_id="u-1", question_id=1, selected_option_id=10),
        handler,
    )

    assert result.is_correct
    assert result.xp_earned == 5


def test_get_material():
    def handler(request):
        assert request.url.params["materialId"] == "42"
        return httpx.Response(
            200,
            json={"success": True, "materials": [{"id": 42, "title": "T", "content": "C", "topicId": 7}]},
        )

    material = _run(lambda api: api.get_material(42), handler)

    assert material.title == "T"
    assert material.topic_id == 7

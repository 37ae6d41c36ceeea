"""
Async HTTP transport used by the quiz session to reach the quiz API.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quizgen.schemas.quiz_schema import (
    FetchQuizResponse,
    MaterialListResponse,
    MaterialView,
    QuizQuestionView,
    SubmitAnswerResponse,
)

logger = logging.getLogger(__name__)


class QuizApiError(Exception):
    """Raised when the quiz API answers with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        body: Any = resp.json()
    except ValueError:
        return f"{fallback} (status={resp.status_code})"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        return detail.get("details") or detail.get("error") or fallback
    if isinstance(detail, str):
        return detail
    return fallback


class QuizApiClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    ``fetch_questions`` reports "not generated yet" as ``None`` rather than an
    error, since the session treats a 404 as a normal signal.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout_seconds)

    async def __aenter__(self) -> "QuizApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_questions(self, material_id: int) -> list[QuizQuestionView] | None:
        resp = await self._client.get(f"/api/quiz/game/{material_id}")
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise QuizApiError(_error_message(resp, "Failed to fetch quiz questions"), resp.status_code)
        return FetchQuizResponse.model_validate(resp.json()).questions

    async def generate(self, *, material_id: int, topic_id: int | None, title: str, content: str) -> dict:
        # No transport timeout here: the caller enforces its own deadline.
        resp = await self._client.post(
            "/api/quiz/generate",
            json={
                "materialId": material_id,
                "topicId": topic_id,
                "materialTitle": title,
                "materialContent": content,
            },
            timeout=None,
        )
        if resp.is_error:
            raise QuizApiError(_error_message(resp, "Failed to generate questions"), resp.status_code)
        data = resp.json()
        logger.info("generate response material_id=%s already_exists=%s", material_id, data.get("alreadyExists"))
        return data

    async def submit_answer(
        self,
        *,
        material_id: int,
        user_id: str,
        question_id: int,
        selected_option_id: int,
    ) -> SubmitAnswerResponse:
        resp = await self._client.post(
            f"/api/quiz/game/{material_id}",
            json={"userId": user_id, "questionId": question_id, "selectedOptionId": selected_option_id},
        )
        if resp.is_error:
            raise QuizApiError(_error_message(resp, "Failed to submit answer"), resp.status_code)
        return SubmitAnswerResponse.model_validate(resp.json())

    async def get_material(self, material_id: int) -> MaterialView | None:
        resp = await self._client.get("/api/materials", params={"materialId": material_id})
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise QuizApiError(_error_message(resp, "Could not fetch material data"), resp.status_code)
        materials = MaterialListResponse.model_validate(resp.json()).materials
        return materials[0] if materials else None

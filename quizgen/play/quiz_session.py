"""
Client-side quiz retrieval: fetch questions, generate them on first access,
and keep the learner's answer ledger.

One ``QuizSession`` drives one learner on one material. It runs on a single
event loop and only suspends at network calls, so its state is never mutated
by two transitions at once. The generation guard lives inside ``QuizState``
and only deduplicates triggers from this session; other tabs and learners are
kept apart by the unique constraint on the server.

Typical use::

    async with QuizApiClient(base_url) as api:
        session = QuizSession(material_id=42, user_id="u-1", api=api, content=api)
        state = await session.load()
        if state.phase is Phase.READY:
            await session.submit_answer(question_id, option_id)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed

from quizgen.core.config import Settings
from quizgen.core.errors import ClientTimeoutError
from quizgen.schemas.quiz_schema import MaterialView, QuizQuestionView, SubmitAnswerResponse
from quizgen.services import scoring

logger = logging.getLogger(__name__)

POLL_TIMEOUT_MESSAGE = "Question generation is taking too long. Please try again later."
GENERATE_TIMEOUT_MESSAGE = "Question generation timed out. The AI service is taking too long. Please try again."


class QuizSessionError(Exception):
    """Raised for session misuse or missing collaborator data."""


class Phase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    NOT_FOUND = "not_found"
    GENERATING = "generating"
    POLLING = "polling"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class GenerationPhase(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class QuizApi(Protocol):
    async def fetch_questions(self, material_id: int) -> list[QuizQuestionView] | None: ...

    async def generate(self, *, material_id: int, topic_id: int | None, title: str, content: str) -> dict: ...

    async def submit_answer(
        self, *, material_id: int, user_id: str, question_id: int, selected_option_id: int
    ) -> SubmitAnswerResponse: ...


class ContentService(Protocol):
    async def get_material(self, material_id: int) -> MaterialView | None: ...


@dataclass(frozen=True)
class RetrievalPolicy:
    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 15
    generate_timeout_seconds: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetrievalPolicy":
        return cls(
            poll_interval_seconds=settings.quiz_poll_interval_seconds,
            poll_max_attempts=settings.quiz_poll_max_attempts,
            generate_timeout_seconds=settings.quiz_generate_timeout_seconds,
        )


@dataclass
class QuizAnswer:
    question_id: int
    selected_option_id: int
    is_correct: bool
    correct_option_id: int


@dataclass
class QuizSummary:
    correct: int
    total: int
    percentage: int
    passed: bool
    xp: int
    feedback: scoring.FeedbackBand


@dataclass
class QuizState:
    phase: Phase = Phase.IDLE
    generation: GenerationPhase = GenerationPhase.IDLE
    questions: list[QuizQuestionView] = field(default_factory=list)
    current_index: int = 0
    answers: list[QuizAnswer] = field(default_factory=list)
    score: int = 0
    total_xp: int = 0
    is_completed: bool = False
    error: str | None = None
    transitions: list[Phase] = field(default_factory=list)

    @property
    def can_retry(self) -> bool:
        return self.phase in (Phase.FAILED, Phase.TIMED_OUT)


class QuizSession:
    def __init__(
        self,
        material_id: int,
        user_id: str,
        api: QuizApi,
        content: ContentService,
        policy: RetrievalPolicy | None = None,
    ) -> None:
        self.material_id = material_id
        self.user_id = user_id
        self.api = api
        self.content = content
        self.policy = policy or RetrievalPolicy()
        self.state = QuizState()

    def _transition(self, phase: Phase) -> None:
        logger.debug("material_id=%s %s -> %s", self.material_id, self.state.phase.value, phase.value)
        self.state.phase = phase
        self.state.transitions.append(phase)

    def _ready(self, questions: list[QuizQuestionView]) -> None:
        self.state.questions = list(questions)
        self.state.error = None
        self._transition(Phase.READY)

    def _fail(self, phase: Phase, message: str) -> None:
        self.state.error = message
        self._transition(phase)

    async def load(self) -> QuizState:
        """Fetch questions, generating or waiting for them when none exist yet."""
        self.state.error = None
        self._transition(Phase.FETCHING)
        try:
            questions = await self.api.fetch_questions(self.material_id)
            if questions is not None:
                self._ready(questions)
                return self.state

            self._transition(Phase.NOT_FOUND)
            if self.state.generation is GenerationPhase.IN_FLIGHT:
                logger.info("Generation already in flight for material_id=%s, polling", self.material_id)
                await self._poll()
            else:
                await self._generate_and_fetch()
        except ClientTimeoutError as exc:
            logger.warning("Quiz load timed out for material_id=%s: %s", self.material_id, exc)
            self._fail(Phase.TIMED_OUT, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.error("Quiz load failed for material_id=%s: %s", self.material_id, exc)
            self._fail(Phase.FAILED, str(exc) or "Unknown error")
        return self.state

    async def _poll(self) -> None:
        """Re-fetch every poll interval, waiting before each attempt including the first."""
        self._transition(Phase.POLLING)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.poll_max_attempts),
            wait=wait_fixed(self.policy.poll_interval_seconds),
            retry=retry_if_result(lambda questions: questions is None),
            sleep=asyncio.sleep,
        )
        try:
            await asyncio.sleep(self.policy.poll_interval_seconds)
            questions = await retrying(self.api.fetch_questions, self.material_id)
        except RetryError as exc:
            raise ClientTimeoutError(POLL_TIMEOUT_MESSAGE) from exc
        self._ready(questions)

    async def _generate_and_fetch(self) -> None:
        self.state.generation = GenerationPhase.IN_FLIGHT
        self._transition(Phase.GENERATING)
        try:
            material = await self.content.get_material(self.material_id)
            if material is None:
                raise QuizSessionError("Could not fetch material data")

            try:
                # Only local waiting stops on timeout; the server keeps generating.
                await asyncio.wait_for(
                    self.api.generate(
                        material_id=self.material_id,
                        topic_id=material.topic_id,
                        title=material.title,
                        content=material.content or "No content available",
                    ),
                    timeout=self.policy.generate_timeout_seconds,
                )
            except asyncio.TimeoutError as exc:
                raise ClientTimeoutError(GENERATE_TIMEOUT_MESSAGE) from exc

            self._transition(Phase.FETCHING)
            questions = await self.api.fetch_questions(self.material_id)
            if questions is None:
                raise QuizSessionError("Failed to fetch questions after generation")
            self._ready(questions)
        finally:
            self.state.generation = GenerationPhase.IDLE

    async def retry(self) -> QuizState:
        return await self.load()

    async def reset(self) -> QuizState:
        """Drop progress and the ledger, then load again."""
        self.state = QuizState()
        return await self.load()

    async def submit_answer(self, question_id: int, selected_option_id: int) -> SubmitAnswerResponse:
        if self.state.phase is not Phase.READY:
            raise QuizSessionError(f"Cannot submit an answer while {self.state.phase.value}")

        try:
            result = await self.api.submit_answer(
                material_id=self.material_id,
                user_id=self.user_id,
                question_id=question_id,
                selected_option_id=selected_option_id,
            )
        except Exception as exc:
            self.state.error = str(exc) or "Failed to submit answer"
            raise

        answer = QuizAnswer(
            question_id=question_id,
            selected_option_id=selected_option_id,
            is_correct=result.is_correct,
            correct_option_id=result.correct_option_id,
        )
        # One ledger entry per question; a re-answer replaces the earlier one.
        self.state.answers = [a for a in self.state.answers if a.question_id != question_id]
        self.state.answers.append(answer)
        self.state.score = scoring.score(self.state.answers)
        # xp_earned is a delta of the stored XP and can be negative.
        self.state.total_xp += result.xp_earned
        self.state.is_completed = self.state.current_index >= len(self.state.questions) - 1
        return result

    def next_question(self) -> None:
        last = max(len(self.state.questions) - 1, 0)
        self.state.current_index = min(self.state.current_index + 1, last)

    @property
    def current_question(self) -> QuizQuestionView | None:
        if 0 <= self.state.current_index < len(self.state.questions):
            return self.state.questions[self.state.current_index]
        return None

    @property
    def current_answer(self) -> QuizAnswer | None:
        question = self.current_question
        if question is None:
            return None
        return next((a for a in self.state.answers if a.question_id == question.id), None)

    @property
    def is_current_question_answered(self) -> bool:
        return self.current_answer is not None

    @property
    def progress(self) -> int:
        return scoring.progress_percentage(len(self.state.answers), len(self.state.questions))

    def summary(self) -> QuizSummary:
        total = len(self.state.questions)
        percent = scoring.percentage(self.state.score, total)
        return QuizSummary(
            correct=self.state.score,
            total=total,
            percentage=percent,
            passed=scoring.passed(percent),
            xp=self.state.total_xp,
            feedback=scoring.feedback(percent),
        )

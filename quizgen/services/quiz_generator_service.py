import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quizgen.core.errors import (
    AIContractViolation,
    AIGatewayError,
    InputValidationError,
    PersistenceError,
)
from quizgen.db.repositories.quiz_repo import QuizRepository
from quizgen.schemas.quiz_schema import GeneratedQuestion
from quizgen.services.question_validator import (
    OPTIONS_PER_QUESTION,
    QUESTIONS_PER_MATERIAL,
    validate_questions,
)


class CompletionClient(Protocol):
    def generate(self, prompt: str) -> str: ...


@dataclass
class GenerationResult:
    already_exists: bool
    questions: list[GeneratedQuestion] = field(default_factory=list)


@dataclass
class QuizGeneratorService:
    """
    Turns a material's title/content into a persisted set of quiz questions.

    The existence check up front only saves an AI call; the unique
    (material_id, question_number) constraint is what keeps a material from
    ending up with two question sets.
    """

    quiz_repo: QuizRepository
    llm_client: Optional[CompletionClient] = None
    logger: logging.Logger = logging.getLogger(__name__)

    def generate(
        self,
        *,
        material_id: int | None,
        topic_id: int | None,
        title: str | None,
        content: str | None,
        db: Session,
    ) -> GenerationResult:
        start_time = time.perf_counter()
        self._check_inputs(material_id=material_id, topic_id=topic_id, title=title, content=content)

        if self.llm_client is None:
            self.logger.error("Quiz generation requested but no AI gateway is configured")
            raise AIGatewayError("AI service not configured")

        try:
            exists = self.quiz_repo.exists_for_material(db, material_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to check existing questions: {exc}") from exc
        if exists:
            self.logger.info("Questions already exist for material_id=%s", material_id)
            return GenerationResult(already_exists=True)

        prompt = self._build_prompt(title=title, content=content)
        raw = self.llm_client.generate(prompt)
        questions = self._parse_response(raw)

        if not self._persist(db, material_id=material_id, topic_id=topic_id, questions=questions):
            return GenerationResult(already_exists=True)

        self.logger.info(
            "quiz generation completed",
            extra={
                "material_id": material_id,
                "questions": len(questions),
                "elapsed_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return GenerationResult(already_exists=False, questions=questions)

    def _check_inputs(self, **fields) -> None:
        missing = [
            name
            for name, value in fields.items()
            if value is None
            or (isinstance(value, str) and not value.strip())
            # ids are positive; 0 counts as missing
            or (name.endswith("_id") and isinstance(value, int) and value <= 0)
        ]
        if missing:
            raise InputValidationError(f"Missing required fields: {', '.join(missing)}")

    def _build_prompt(self, title: str, content: str) -> str:
        return (
            "You are an expert author of educational quizzes. Write "
            f"{QUESTIONS_PER_MATERIAL} high-quality multiple-choice questions based on the material below.\n\n"
            f"Material title: {title}\n"
            f"Material content: {content}\n\n"
            "RULES:\n"
            f"1. Write exactly {QUESTIONS_PER_MATERIAL} questions that test understanding of the key concepts\n"
            f"2. Every question MUST have EXACTLY {OPTIONS_PER_QUESTION} options labelled A, B, C, D\n"
            "3. Exactly 1 option per question is correct\n"
            "4. Difficulty increases: question 1 easy, question 2 medium, question 3 hard\n"
            "5. Avoid questions that copy sentences literally from the material\n"
            "6. Wrong options must be plausible distractors\n\n"
            "OUTPUT FORMAT (JSON):\n"
            "{\n"
            '  "questions": [\n'
            "    {\n"
            '      "questionNumber": 1,\n'
            '      "questionText": "First question?",\n'
            '      "options": [\n'
            '        {"letter": "A", "text": "Option A", "isCorrect": false},\n'
            '        {"letter": "B", "text": "Option B", "isCorrect": true},\n'
            '        {"letter": "C", "text": "Option C", "isCorrect": false},\n'
            '        {"letter": "D", "text": "Option D", "isCorrect": false}\n'
            "      ]\n"
            "    }\n"
            "  ]\n"
            "}\n\n"
            "Return ONLY the JSON, no extra text, comments or code fences."
        )

    def _parse_response(self, response_text: str) -> list[GeneratedQuestion]:
        data = self._extract_json(response_text)
        if not isinstance(data, dict):
            self.logger.warning("AI response is not a JSON object: %r", (response_text or "")[:200])
            raise AIContractViolation("AI response is not valid JSON", reason="malformed_payload")

        candidate = data.get("questions")
        result = validate_questions(candidate)
        if not result.valid:
            self.logger.warning("AI response rejected: %s (%s)", result.reason.value, result.detail)
            raise AIContractViolation(f"AI response rejected: {result.detail}", reason=result.reason.value)

        questions = [GeneratedQuestion.model_validate(q) for q in candidate]
        return sorted(questions, key=lambda q: q.question_number)

    def _extract_json(self, text: str) -> dict | None:
        """
        Leniently pull a JSON object out of the AI response.
        """
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass

        cleaned = text.strip()
        if cleaned.startswith("```"):
            cleaned = cleaned.strip("`")
            if cleaned.lower().startswith("json"):
                cleaned = cleaned[4:].strip()

        match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                return None
        return None

    def _persist(
        self,
        db: Session,
        *,
        material_id: int,
        topic_id: int,
        questions: list[GeneratedQuestion],
    ) -> bool:
        """
        Write questions one at a time, each followed by its options.

        Returns False when a concurrent generator already owns question 1.
        A failure on a later write leaves earlier rows in place.
        """
        for q in questions:
            try:
                row = self.quiz_repo.add_question(
                    db,
                    material_id=material_id,
                    topic_id=topic_id,
                    question_number=q.question_number,
                    question_text=q.question_text,
                )
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                if q.question_number == 1:
                    self.logger.warning(
                        "Concurrent generation detected for material_id=%s; keeping existing questions",
                        material_id,
                    )
                    return False
                raise PersistenceError(f"Failed to insert question {q.question_number}: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                db.rollback()
                self.logger.error("Failed to insert question %s: %s", q.question_number, exc)
                raise PersistenceError(f"Failed to insert question {q.question_number}: {exc}") from exc

            try:
                self.quiz_repo.add_options(
                    db,
                    row.id,
                    [{"letter": o.letter, "text": o.text, "is_correct": o.is_correct} for o in q.options],
                )
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                self.logger.error(
                    "Failed to insert options for question %s (question row %s kept): %s",
                    q.question_number,
                    row.id,
                    exc,
                )
                raise PersistenceError(
                    f"Failed to insert options for question {q.question_number}: {exc}"
                ) from exc

        return True

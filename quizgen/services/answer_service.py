import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizgen.core.errors import InputValidationError, PersistenceError, QuizNotFoundError
from quizgen.db.models.progress import UserQuizAnswer, UserQuizProgress
from quizgen.db.repositories.quiz_repo import QuizRepository
from quizgen.services import scoring


@dataclass
class AnswerResult:
    is_correct: bool
    correct_option_id: int
    xp_earned: int


@dataclass
class AnswerService:
    """
    Grades a submitted option and keeps the per-user answer/progress ledger.
    """

    quiz_repo: QuizRepository
    logger: logging.Logger = logging.getLogger(__name__)

    def submit(
        self,
        *,
        user_id: str,
        question_id: int,
        selected_option_id: int,
        db: Session,
        material_id: int | None = None,
    ) -> AnswerResult:
        question = self.quiz_repo.get_question(db, question_id)
        if question is None or (material_id is not None and question.material_id != material_id):
            raise QuizNotFoundError(f"Question {question_id} not found")

        option = self.quiz_repo.get_option(db, selected_option_id)
        if option is None or option.question_id != question_id:
            raise InputValidationError(f"Option {selected_option_id} does not belong to question {question_id}")

        correct_option = self.quiz_repo.get_correct_option(db, question_id)
        if correct_option is None:
            # Orphaned question left by a partial generation write.
            raise PersistenceError(f"Question {question_id} has no correct option stored")

        is_correct = bool(option.is_correct)
        try:
            xp_earned = self._record(
                db, user_id=user_id, question=question, option_id=option.id, is_correct=is_correct
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            self.logger.error("Failed to record answer user=%s question=%s: %s", user_id, question_id, exc)
            raise PersistenceError(f"Failed to record answer: {exc}") from exc

        self.logger.info(
            "answer submitted",
            extra={"question_id": question_id, "is_correct": is_correct, "xp_earned": xp_earned},
        )
        return AnswerResult(is_correct=is_correct, correct_option_id=correct_option.id, xp_earned=xp_earned)

    def _record(self, db: Session, *, user_id: str, question, option_id: int, is_correct: bool) -> int:
        """Upsert the answer and progress rows; returns the change in stored XP."""
        previous = db.execute(
            select(UserQuizAnswer).where(
                UserQuizAnswer.user_id == user_id,
                UserQuizAnswer.question_id == question.id,
            )
        ).scalars().first()

        progress = db.execute(
            select(UserQuizProgress).where(
                UserQuizProgress.user_id == user_id,
                UserQuizProgress.material_id == question.material_id,
            )
        ).scalars().first()
        if progress is None:
            total = len(self.quiz_repo.list_for_material(db, question.material_id))
            progress = UserQuizProgress(
                user_id=user_id,
                material_id=question.material_id,
                questions_answered=0,
                correct_answers=0,
                total_questions=total,
                xp_earned=0,
                is_completed=False,
            )
            db.add(progress)
        xp_before = progress.xp_earned

        if previous is None:
            db.add(
                UserQuizAnswer(
                    user_id=user_id,
                    question_id=question.id,
                    selected_option_id=option_id,
                    is_correct=is_correct,
                )
            )
            progress.questions_answered += 1
            progress.correct_answers += int(is_correct)
        else:
            # Re-answer overwrites the earlier attempt.
            progress.correct_answers += int(is_correct) - int(previous.is_correct)
            previous.selected_option_id = option_id
            previous.is_correct = is_correct
            previous.answered_at = datetime.now(timezone.utc)

        progress.xp_earned = scoring.xp(progress.correct_answers)
        if not progress.is_completed and progress.questions_answered >= progress.total_questions:
            progress.is_completed = True
            progress.completed_at = datetime.now(timezone.utc)
        return progress.xp_earned - xp_before

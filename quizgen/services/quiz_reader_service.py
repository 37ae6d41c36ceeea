import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from quizgen.core.errors import QuizNotFoundError
from quizgen.db.repositories.quiz_repo import QuizRepository
from quizgen.schemas.quiz_schema import QuizOptionView, QuizQuestionView


@dataclass
class QuizReaderService:
    """Player-facing read path: questions without any correctness flags."""

    quiz_repo: QuizRepository
    logger: logging.Logger = logging.getLogger(__name__)

    def fetch(self, material_id: int, db: Session) -> list[QuizQuestionView]:
        rows = self.quiz_repo.list_for_material(db, material_id)
        if not rows:
            raise QuizNotFoundError(f"No quiz questions for material {material_id}")

        return [
            QuizQuestionView(
                id=row.id,
                material_id=row.material_id,
                topic_id=row.topic_id,
                question_number=row.question_number,
                question_text=row.question_text,
                options=[
                    QuizOptionView(id=opt.id, letter=opt.option_letter, text=opt.option_text)
                    for opt in sorted(row.options, key=lambda o: o.option_letter)
                ],
            )
            for row in rows
        ]

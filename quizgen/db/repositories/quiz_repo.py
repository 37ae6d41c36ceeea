from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from quizgen.db.models.quiz import QuizOption, QuizQuestion


class QuizRepository:
    """
    Question/option table access scoped by material id.
    """

    def exists_for_material(self, db: Session, material_id: int) -> bool:
        stmt = select(QuizQuestion.id).where(QuizQuestion.material_id == material_id).limit(1)
        return db.execute(stmt).first() is not None

    def list_for_material(self, db: Session, material_id: int) -> list[QuizQuestion]:
        stmt = (
            select(QuizQuestion)
            .where(QuizQuestion.material_id == material_id)
            .order_by(QuizQuestion.question_number)
        )
        return list(db.execute(stmt).scalars().all())

    def get_question(self, db: Session, question_id: int) -> QuizQuestion | None:
        return db.get(QuizQuestion, question_id)

    def get_option(self, db: Session, option_id: int) -> QuizOption | None:
        return db.get(QuizOption, option_id)

    def get_correct_option(self, db: Session, question_id: int) -> QuizOption | None:
        stmt = (
            select(QuizOption)
            .where(QuizOption.question_id == question_id, QuizOption.is_correct.is_(True))
            .limit(1)
        )
        return db.execute(stmt).scalars().first()

    def add_question(
        self,
        db: Session,
        *,
        material_id: int,
        topic_id: int,
        question_number: int,
        question_text: str,
    ) -> QuizQuestion:
        """Stage a question row and flush so its id is available for the options."""
        question = QuizQuestion(
            material_id=material_id,
            topic_id=topic_id,
            question_number=question_number,
            question_text=question_text,
        )
        db.add(question)
        db.flush()
        return question

    def add_options(self, db: Session, question_id: int, options: Iterable[dict]) -> list[QuizOption]:
        rows = [
            QuizOption(
                question_id=question_id,
                option_letter=opt["letter"],
                option_text=opt["text"],
                is_correct=opt["is_correct"],
            )
            for opt in options
        ]
        db.add_all(rows)
        db.flush()
        return rows

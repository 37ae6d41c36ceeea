from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from quizgen.db.session import Base


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    # Authoritative guard against two generators writing the same material concurrently.
    __table_args__ = (UniqueConstraint("material_id", "question_number", name="uq_quiz_question_material_number"),)

    id = Column(Integer, primary_key=True, index=True)
    material_id = Column(Integer, nullable=False, index=True)
    topic_id = Column(Integer, nullable=False)
    question_number = Column(Integer, nullable=False)
    question_text = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    options = relationship(
        "QuizOption",
        back_populates="question",
        order_by="QuizOption.option_letter",
        lazy="selectin",
    )


class QuizOption(Base):
    __tablename__ = "quiz_options"
    __table_args__ = (UniqueConstraint("question_id", "option_letter", name="uq_quiz_option_letter"),)

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("quiz_questions.id"), nullable=False, index=True)
    option_letter = Column(String(1), nullable=False)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("QuizQuestion", back_populates="options")

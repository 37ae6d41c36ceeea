from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint, func

from quizgen.db.session import Base


class UserQuizAnswer(Base):
    __tablename__ = "user_quiz_answers"
    __table_args__ = (UniqueConstraint("user_id", "question_id", name="uq_user_quiz_answer"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    question_id = Column(Integer, nullable=False)
    selected_option_id = Column(Integer, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    answered_at = Column(DateTime, nullable=False, server_default=func.now())


class UserQuizProgress(Base):
    __tablename__ = "user_material_quiz_progress"
    __table_args__ = (UniqueConstraint("user_id", "material_id", name="uq_user_material_progress"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    material_id = Column(Integer, nullable=False)
    questions_answered = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False)
    xp_earned = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

"""
Quiz model - immutable quiz definitions pushed by the quiz generator
"""
from sqlalchemy import Column, String, Integer, TIMESTAMP, JSON, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from quizattempts.database import Base
import uuid


class Quiz(Base):
    """
    Quizzes table - question set, answer key, difficulty and time estimate
    """
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(150))
    difficulty = Column(String(20), nullable=False, default="medium")
    estimated_time_minutes = Column(Integer, nullable=False, default=15)
    # [{question_id, type, question, options, correct_answer, subject_area, weight, explanation}]
    questions = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Quiz(id={self.id}, difficulty={self.difficulty}, questions={len(self.questions or [])})>"

"""
QuizAttempt model - one user's pass through one quiz
"""
from sqlalchemy import Column, String, Integer, TIMESTAMP, DECIMAL, Text, JSON, Uuid, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import JSONB
from quizattempts.config import settings
from quizattempts.constants import STATUS_IN_PROGRESS
from quizattempts.database import Base
import uuid

JSONType = JSON().with_variant(JSONB, "postgresql")


class QuizAttempt(Base):
    """
    Quiz attempts table - answer ledger, running score and completion results

    `version` is the optimistic lock: every UPDATE is issued with
    `WHERE version = <loaded version>` and fails with StaleDataError when
    another writer got there first.
    """
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        # At most one in-progress attempt per (user, quiz)
        Index(
            "uq_quiz_attempts_active",
            "user_id",
            "quiz_id",
            unique=True,
            sqlite_where=text("status = 'in_progress'"),
            postgresql_where=text("status = 'in_progress'"),
        ),
        Index("ix_quiz_attempts_quiz_status", "quiz_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id"), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_IN_PROGRESS, index=True)

    started_at = Column(TIMESTAMP, nullable=False)
    completed_at = Column(TIMESTAMP, nullable=True)
    time_spent = Column(Integer, nullable=False, default=0)  # milliseconds

    answers = Column(JSONType, nullable=False, default=list)  # Answer ledger
    score = Column(Integer, nullable=False, default=0)  # Correct answers
    percentage = Column(DECIMAL(5, 2), nullable=False, default=0)
    points_earned = Column(Integer, nullable=False, default=0)
    performance_level = Column(String(20), nullable=True)

    strengths = Column(JSONType, nullable=False, default=list)
    weaknesses = Column(JSONType, nullable=False, default=list)
    subject_performance = Column(JSONType, nullable=False, default=list)  # Every area, not only strengths/weaknesses

    feedback_overall = Column(Text, nullable=False, default="")
    feedback_improvements = Column(JSONType, nullable=False, default=list)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def has_passed(self) -> bool:
        return float(self.percentage or 0) >= settings.PASSING_PERCENTAGE

    @property
    def accuracy(self) -> float:
        answers = self.answers or []
        if not answers:
            return 0.0
        correct = sum(1 for a in answers if a.get("is_correct"))
        return correct / len(answers) * 100

    @property
    def time_spent_formatted(self) -> str:
        ms = self.time_spent or 0
        minutes = ms // (1000 * 60)
        seconds = (ms % (1000 * 60)) // 1000
        return f"{minutes}m {seconds}s"

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, user_id={self.user_id}, status={self.status}, score={self.score})>"

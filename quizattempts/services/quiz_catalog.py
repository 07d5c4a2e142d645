"""
Quiz catalog adapter - read-only quiz definitions for the scoring engine
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from quizattempts.exceptions import QuizNotFoundError
from quizattempts.models import Quiz
from quizattempts.schemas.quiz import QuizCreate, QuizDefinition
from quizattempts.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)


class QuizCatalog:
    """
    Looks up quiz definitions, cached in Redis

    Quizzes are immutable once registered, so cached entries never need
    invalidation beyond their TTL.
    """

    def __init__(self, cache: Optional[CacheService] = None):
        self.cache = cache or cache_service

    def get_quiz(self, db: Session, quiz_id: UUID) -> QuizDefinition:
        """
        Fetch a quiz definition

        Raises:
            QuizNotFoundError: no quiz with this id
        """
        cache_key = self.cache.quiz_cache_key(str(quiz_id))

        cached = self.cache.get(cache_key)
        if cached:
            return QuizDefinition(**cached)

        quiz = db.get(Quiz, quiz_id)
        if not quiz:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")

        definition = QuizDefinition.from_model(quiz)
        self.cache.set(cache_key, definition.model_dump(mode="json"))

        return definition

    def register_quiz(self, db: Session, payload: QuizCreate) -> QuizDefinition:
        """Store a quiz definition supplied by the quiz generator"""
        quiz = Quiz(
            title=payload.title,
            difficulty=payload.difficulty,
            estimated_time_minutes=payload.estimated_time_minutes,
            questions=[q.model_dump(mode="json") for q in payload.questions],
        )

        try:
            db.add(quiz)
            db.commit()
            db.refresh(quiz)
        except Exception:
            db.rollback()
            raise

        logger.info(f"Quiz registered: {quiz.id} ({len(payload.questions)} questions, {quiz.difficulty})")

        return QuizDefinition.from_model(quiz)


# Global instance
quiz_catalog = QuizCatalog()

"""
Quiz attempt lifecycle

    in_progress --complete--> completed
    in_progress --abandon---> abandoned

Both targets are terminal. Every operation reloads the attempt from the
database, applies its change and commits under the optimistic lock, so a
stale writer is rejected instead of overwriting a newer ledger.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizattempts.constants import (
    MAX_TIME_SPENT_MS,
    STATUS_ABANDONED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
)
from quizattempts.database import commit_or_conflict
from quizattempts.exceptions import AttemptNotFoundError, InvalidStateError
from quizattempts.models import QuizAttempt
from quizattempts.services.answer_ledger import answer_ledger
from quizattempts.services.event_publisher import (
    EventPublisher,
    event_publisher,
    points_awarded_event,
    quiz_completed_event,
)
from quizattempts.services.feedback_service import FeedbackService, feedback_service
from quizattempts.services.performance_service import PerformanceService, performance_service
from quizattempts.services.points_service import PointsService, points_service
from quizattempts.services.quiz_catalog import QuizCatalog, quiz_catalog
from quizattempts.services.scoring_service import ScoringService, scoring_service

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AttemptService:
    """Orchestrates scoring, classification, points and feedback per attempt"""

    def __init__(
        self,
        catalog: Optional[QuizCatalog] = None,
        scoring: Optional[ScoringService] = None,
        performance: Optional[PerformanceService] = None,
        points: Optional[PointsService] = None,
        feedback: Optional[FeedbackService] = None,
        publisher: Optional[EventPublisher] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.catalog = catalog or quiz_catalog
        self.scoring = scoring or scoring_service
        self.performance = performance or performance_service
        self.points = points or points_service
        self.feedback = feedback or feedback_service
        self.publisher = publisher or event_publisher
        self.clock = clock or utc_now

    def get_attempt(self, db: Session, attempt_id: UUID) -> QuizAttempt:
        """Load the latest persisted state of an attempt"""
        attempt = db.get(QuizAttempt, attempt_id, populate_existing=True)
        if not attempt:
            raise AttemptNotFoundError(f"Quiz attempt {attempt_id} not found")
        return attempt

    def find_active_attempt(self, db: Session, quiz_id: UUID, user_id: UUID) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.status == STATUS_IN_PROGRESS,
            )
            .populate_existing()
            .first()
        )

    def start(self, db: Session, quiz_id: UUID, user_id: UUID) -> Tuple[QuizAttempt, bool]:
        """
        Start an attempt, or resume the user's in-progress one

        Returns:
            Tuple of (attempt, is_existing)

        Raises:
            QuizNotFoundError: quiz is not in the catalog
        """
        self.catalog.get_quiz(db, quiz_id)

        existing = self.find_active_attempt(db, quiz_id, user_id)
        if existing:
            logger.info(f"Resuming in-progress attempt {existing.id} for user {user_id}")
            return existing, True

        attempt = QuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            status=STATUS_IN_PROGRESS,
            started_at=self.clock(),
            time_spent=0,
            answers=[],
            score=0,
            percentage=0,
            points_earned=0,
        )

        try:
            db.add(attempt)
            db.commit()
        except IntegrityError:
            # Lost a race against a concurrent start for the same pair
            db.rollback()
            existing = self.find_active_attempt(db, quiz_id, user_id)
            if existing:
                logger.info(f"Concurrent start resolved to attempt {existing.id}")
                return existing, True
            raise

        db.refresh(attempt)
        logger.info(f"Quiz attempt started: {attempt.id} (user={user_id}, quiz={quiz_id})")
        return attempt, False

    def submit_answer(
        self,
        db: Session,
        attempt_id: UUID,
        question_id: str,
        answer: Any,
        time_spent_ms: int = 0
    ) -> Dict[str, Any]:
        attempt = self.get_attempt(db, attempt_id)
        self._require_in_progress(attempt, "submit answers to")

        quiz = self.catalog.get_quiz(db, attempt.quiz_id)

        return self.scoring.submit_answer(
            db, attempt, quiz, question_id, answer, time_spent_ms
        )

    def complete(self, db: Session, attempt_id: UUID) -> Dict[str, Any]:
        """
        Finish an attempt and compute every result field

        Classification, points and feedback run in order, each consuming the
        previous step's output, and are committed together with the outbox
        events. Any failure rolls the whole completion back.

        Raises:
            InvalidStateError: attempt already completed or abandoned
            ConcurrencyConflictError: attempt changed during completion
        """
        attempt = self.get_attempt(db, attempt_id)
        self._require_in_progress(attempt, "complete")

        quiz = self.catalog.get_quiz(db, attempt.quiz_id)

        try:
            now = self.clock()
            attempt.status = STATUS_COMPLETED
            attempt.completed_at = now
            attempt.time_spent = self._elapsed_ms(attempt.started_at, now)

            score, percentage = answer_ledger.tally(attempt.answers)
            attempt.score = score
            attempt.percentage = percentage

            analysis = self.performance.analyze_performance(attempt, quiz)
            attempt.performance_level = analysis.performance_level
            attempt.strengths = analysis.strengths
            attempt.weaknesses = analysis.weaknesses
            attempt.subject_performance = analysis.subject_performance

            attempt.points_earned = self.points.calculate_points(
                score,
                quiz.total_questions,
                quiz.difficulty,
                attempt.time_spent,
                quiz.estimated_time_ms,
            )

            feedback = self.feedback.generate_feedback(attempt)
            attempt.feedback_overall = feedback.overall
            attempt.feedback_improvements = feedback.improvements

            db.add(points_awarded_event(attempt))
            db.add(quiz_completed_event(attempt, analysis.subject_performance))
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to complete attempt {attempt_id}: {str(e)}")
            raise

        commit_or_conflict(db, context=f"attempt {attempt_id}")

        logger.info(
            f"Quiz attempt completed: {attempt.id}, score={attempt.score}/{quiz.total_questions}, "
            f"percentage={float(attempt.percentage)}%, points={attempt.points_earned}"
        )

        result = self._completion_result(attempt, quiz.total_questions)
        self._publish_events(db)
        return result

    def abandon(self, db: Session, attempt_id: UUID) -> QuizAttempt:
        """
        Abandon an attempt: no points, no feedback, no events

        Raises:
            InvalidStateError: attempt already completed or abandoned
        """
        attempt = self.get_attempt(db, attempt_id)
        self._require_in_progress(attempt, "abandon")

        now = self.clock()
        attempt.status = STATUS_ABANDONED
        attempt.completed_at = now
        attempt.time_spent = self._elapsed_ms(attempt.started_at, now)
        attempt.points_earned = 0

        commit_or_conflict(db, context=f"attempt {attempt_id}")

        logger.info(
            f"Quiz attempt abandoned: {attempt.id} after {len(attempt.answers or [])} answers"
        )
        return attempt

    def _require_in_progress(self, attempt: QuizAttempt, action: str) -> None:
        if attempt.status != STATUS_IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot {action} attempt {attempt.id}: attempt is already {attempt.status}"
            )

    def _elapsed_ms(self, started_at: datetime, finished_at: datetime) -> int:
        elapsed = int((finished_at - started_at).total_seconds() * 1000)
        # Stalled attempts are capped at the 24h bound
        return max(0, min(elapsed, MAX_TIME_SPENT_MS))

    def _completion_result(self, attempt: QuizAttempt, total_questions: int) -> Dict[str, Any]:
        return {
            "attempt_id": attempt.id,
            "status": attempt.status,
            "score": attempt.score,
            "total_questions": total_questions,
            "percentage": float(attempt.percentage),
            "points_earned": attempt.points_earned,
            "performance_level": attempt.performance_level,
            "time_spent": attempt.time_spent,
            "strengths": attempt.strengths,
            "weaknesses": attempt.weaknesses,
            "feedback": {
                "overall": attempt.feedback_overall,
                "improvements": attempt.feedback_improvements,
            },
        }

    def _publish_events(self, db: Session) -> None:
        # The completion is already durable; undelivered events stay pending
        try:
            self.publisher.publish_pending(db)
        except Exception as e:
            db.rollback()
            logger.error(f"Event publishing failed, will retry on next completion: {str(e)}")


# Global instance
attempt_service = AttemptService()

"""
Analytics service for attempt results, user statistics and leaderboards

Only completed attempts count toward statistics and leaderboards;
abandoned attempts never contribute.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from quizattempts.constants import ATTEMPT_STATUSES, STATUS_ABANDONED, STATUS_COMPLETED
from quizattempts.exceptions import AttemptNotFoundError, InvalidStateError, ValidationError
from quizattempts.models import QuizAttempt
from quizattempts.services.quiz_catalog import QuizCatalog, quiz_catalog

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for read-side views over quiz attempts"""

    def __init__(self, catalog: Optional[QuizCatalog] = None):
        self.catalog = catalog or quiz_catalog

    def get_attempt_results(self, db: Session, attempt_id: UUID) -> Dict[str, Any]:
        """
        Detailed results of a completed attempt

        Args:
            db: Database session
            attempt_id: Attempt UUID

        Returns:
            Dictionary with scores, analysis, feedback and question details
        """
        attempt = db.get(QuizAttempt, attempt_id)
        if not attempt:
            raise AttemptNotFoundError(f"Quiz attempt {attempt_id} not found")
        if attempt.status != STATUS_COMPLETED:
            raise InvalidStateError(
                f"Results are only available for completed attempts (attempt is {attempt.status})"
            )

        quiz = self.catalog.get_quiz(db, attempt.quiz_id)

        question_details = []
        for answer in attempt.answers or []:
            question = quiz.get_question(answer["question_id"])
            question_details.append({
                "question_id": answer["question_id"],
                "question": question.question if question else "Question not found",
                "user_answer": answer["user_answer"],
                "correct_answer": question.correct_answer if question else None,
                "is_correct": answer["is_correct"],
                "explanation": (question.explanation if question else None) or "No explanation available",
                "points_earned": answer.get("points_earned", 0),
                "time_spent": answer.get("time_spent", 0),
            })

        return {
            "attempt_id": attempt.id,
            "quiz_id": attempt.quiz_id,
            "score": attempt.score,
            "total_questions": quiz.total_questions,
            "percentage": float(attempt.percentage),
            "accuracy": round(attempt.accuracy, 2),
            "has_passed": attempt.has_passed,
            "points_earned": attempt.points_earned,
            "performance_level": attempt.performance_level,
            "time_spent": attempt.time_spent,
            "time_spent_formatted": attempt.time_spent_formatted,
            "completed_at": attempt.completed_at,
            "strengths": attempt.strengths or [],
            "weaknesses": attempt.weaknesses or [],
            "feedback": {
                "overall": attempt.feedback_overall,
                "improvements": attempt.feedback_improvements or [],
            },
            "question_details": question_details,
        }

    def list_user_attempts(
        self,
        db: Session,
        user_id: UUID,
        status: Optional[str] = None,
        include_abandoned: bool = False,
        limit: int = 20,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """A user's attempts, newest first"""

        if status and status not in ATTEMPT_STATUSES:
            raise ValidationError(
                f"status must be one of {', '.join(ATTEMPT_STATUSES)}", field="status"
            )

        query = db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id)

        if status:
            query = query.filter(QuizAttempt.status == status)
        elif not include_abandoned:
            query = query.filter(QuizAttempt.status != STATUS_ABANDONED)

        attempts = (
            query.order_by(QuizAttempt.started_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        return [self._summarize(a) for a in attempts]

    def list_quiz_attempts(
        self,
        db: Session,
        quiz_id: UUID,
        limit: int = 50,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Completed attempts for a quiz, paged

        Best percentage first; among equal scores the most recent comes first.
        """
        attempts = (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.status == STATUS_COMPLETED,
            )
            .order_by(QuizAttempt.percentage.desc(), QuizAttempt.completed_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        return [self._summarize(a) for a in attempts]

    def _summarize(self, attempt: QuizAttempt) -> Dict[str, Any]:
        return {
            "attempt_id": attempt.id,
            "user_id": attempt.user_id,
            "quiz_id": attempt.quiz_id,
            "status": attempt.status,
            "score": attempt.score,
            "percentage": float(attempt.percentage or 0),
            "points_earned": attempt.points_earned,
            "performance_level": attempt.performance_level,
            "started_at": attempt.started_at,
            "completed_at": attempt.completed_at,
        }

    def get_user_stats(self, db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Aggregate statistics over a user's completed attempts

        Returns:
            Dictionary with totals, averages, best score and subject mastery
        """
        totals = (
            db.query(
                func.count(QuizAttempt.id),
                func.avg(QuizAttempt.percentage),
                func.max(QuizAttempt.percentage),
                func.sum(QuizAttempt.points_earned),
                func.avg(QuizAttempt.time_spent),
            )
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.status == STATUS_COMPLETED,
            )
            .one()
        )
        total_attempts, avg_percentage, best_percentage, total_points, avg_time = totals

        completed = (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.status == STATUS_COMPLETED,
            )
            .all()
        )

        return {
            "user_id": user_id,
            "total_attempts": total_attempts or 0,
            "average_percentage": round(float(avg_percentage or 0), 2),
            "best_percentage": round(float(best_percentage or 0), 2),
            "total_points_earned": int(total_points or 0),
            "average_time_spent": int(avg_time or 0),
            "subject_mastery": self._calculate_subject_mastery(completed),
        }

    def _calculate_subject_mastery(self, attempts: List[QuizAttempt]) -> List[Dict[str, Any]]:
        """Accuracy per subject area across attempts"""

        area_totals = defaultdict(lambda: {"correct": 0, "total": 0, "attempts": 0})

        for attempt in attempts:
            for item in attempt.subject_performance or []:
                stats = area_totals[item["area"]]
                stats["correct"] += item["correct_answers"]
                stats["total"] += item["total_questions"]
                stats["attempts"] += 1

        mastery_list = []
        for area, stats in area_totals.items():
            if stats["total"] == 0:
                continue
            mastery_list.append({
                "area": area,
                "mastery_percentage": round(stats["correct"] / stats["total"] * 100, 2),
                "total_questions": stats["total"],
                "correct_answers": stats["correct"],
                "attempts": stats["attempts"],
            })

        # Sort by mastery descending
        mastery_list.sort(key=lambda x: x["mastery_percentage"], reverse=True)

        return mastery_list

    def get_quiz_leaderboard(self, db: Session, quiz_id: UUID, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Best completed attempts for a quiz

        Ordered by percentage (high first), then time spent (fast first).
        """
        attempts = (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.status == STATUS_COMPLETED,
            )
            .order_by(QuizAttempt.percentage.desc(), QuizAttempt.time_spent.asc())
            .limit(limit)
            .all()
        )

        return [
            {
                "rank": rank,
                "user_id": a.user_id,
                "attempt_id": a.id,
                "percentage": float(a.percentage),
                "time_spent": a.time_spent,
                "points_earned": a.points_earned,
                "completed_at": a.completed_at,
            }
            for rank, a in enumerate(attempts, start=1)
        ]


# Global instance
analytics_service = AnalyticsService()

"""
Answer scoring service

Per-question credit is question-weighted: a correct answer earns the
question's `weight` (1.0 unless the quiz sets one), an incorrect answer
earns 0. The attempt-level score is always the count of correct answers.
"""
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from quizattempts.constants import MAX_TIME_SPENT_MS
from quizattempts.database import commit_or_conflict
from quizattempts.exceptions import QuestionNotFoundError, ValidationError
from quizattempts.schemas.quiz import QuizDefinition
from quizattempts.services.answer_ledger import AnswerLedger, answer_ledger
from quizattempts.services.answer_rules import parse_answer, is_correct

logger = logging.getLogger(__name__)


class ScoringService:
    """
    Grades one answer at a time against the quiz's answer key

    Strategy:
    - Parse the raw answer into the variant for the question type
    - Compare with that variant's rule (index / boolean / normalised text)
    - Store or replace the answer in the ledger
    - Recompute score and percentage from the whole ledger
    """

    def __init__(self, ledger: AnswerLedger = None):
        self.ledger = ledger or answer_ledger

    def submit_answer(
        self,
        db: Session,
        attempt,
        quiz: QuizDefinition,
        question_id: str,
        raw_answer: Any,
        time_spent_ms: int
    ) -> Dict[str, Any]:
        """
        Score and persist a single answer

        Args:
            db: Database session the attempt belongs to
            attempt: In-progress QuizAttempt
            quiz: Quiz definition holding the answer key
            question_id: Question being answered
            raw_answer: Untyped answer from the caller
            time_spent_ms: Time spent on this question

        Returns:
            Per-question result with running score

        Raises:
            QuestionNotFoundError: question_id not in the quiz
            ValidationError: bad answer shape or time value
            InvalidStateError: attempt is not in progress
            ConcurrencyConflictError: attempt changed underneath us
        """
        question = quiz.get_question(question_id)
        if question is None:
            raise QuestionNotFoundError(
                f"Question {question_id} not found in quiz {quiz.id}"
            )

        if isinstance(time_spent_ms, bool) or not isinstance(time_spent_ms, int):
            raise ValidationError("time_spent_ms must be an integer", field="time_spent_ms")
        if not 0 <= time_spent_ms <= MAX_TIME_SPENT_MS:
            raise ValidationError(
                "time_spent_ms must be between 0 and 24 hours", field="time_spent_ms"
            )

        parsed = parse_answer(question, raw_answer)
        correct = is_correct(question, parsed)
        points_earned = question.weight if correct else 0.0

        resubmitted = self.ledger.find_answer(attempt.answers, question_id) is not None

        self.ledger.record_answer(
            attempt,
            question_id=question_id,
            user_answer=parsed.value,
            is_correct=correct,
            points_earned=points_earned,
            time_spent=time_spent_ms,
        )

        score, percentage = self.ledger.tally(attempt.answers)
        attempt.score = score
        attempt.percentage = percentage

        commit_or_conflict(db, context=f"attempt {attempt.id}")

        answered = len(attempt.answers)

        logger.info(
            f"Answer scored: attempt={attempt.id}, question={question_id}, "
            f"correct={correct}, resubmitted={resubmitted}, running={score}/{answered} ({percentage}%)"
        )

        return {
            "question_id": question_id,
            "is_correct": correct,
            "points_earned": points_earned,
            "correct_answer": question.correct_answer,
            "running_score": score,
            "running_percentage": percentage,
            "questions_answered": answered,
            "total_questions": quiz.total_questions,
            "is_quiz_complete": answered == quiz.total_questions,
        }


# Global instance
scoring_service = ScoringService()

"""
Answer ledger - ordered, deduplicated per-question responses of one attempt
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from quizattempts.constants import STATUS_IN_PROGRESS
from quizattempts.exceptions import InvalidStateError

logger = logging.getLogger(__name__)


class AnswerLedger:
    """
    Keeps at most one answer per question_id

    A resubmission replaces the earlier answer in place (last write wins) so
    the ledger keeps first-answer ordering. The attempt's aggregate score is
    never updated incrementally; `tally` reduces the whole ledger.
    """

    def record_answer(
        self,
        attempt,
        question_id: str,
        user_answer: Any,
        is_correct: bool,
        points_earned: float,
        time_spent: int
    ) -> List[Dict[str, Any]]:
        """
        Store or replace the answer for a question

        Returns:
            The updated ledger (also assigned to attempt.answers)

        Raises:
            InvalidStateError: attempt is not in progress
        """
        if attempt.status != STATUS_IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot record answers on a {attempt.status} attempt"
            )

        entry = {
            "question_id": question_id,
            "user_answer": user_answer,
            "is_correct": bool(is_correct),
            "points_earned": points_earned,
            "time_spent": time_spent,
        }

        # Copy so the JSON column sees a new value on assignment
        ledger = [dict(answer) for answer in (attempt.answers or [])]

        for index, answer in enumerate(ledger):
            if answer["question_id"] == question_id:
                ledger[index] = entry
                logger.debug(f"Replaced answer for question {question_id} on attempt {attempt.id}")
                break
        else:
            ledger.append(entry)

        attempt.answers = ledger
        return ledger

    def find_answer(self, answers: List[Dict[str, Any]], question_id: str) -> Optional[Dict[str, Any]]:
        for answer in answers or []:
            if answer["question_id"] == question_id:
                return answer
        return None

    @staticmethod
    def tally(answers: List[Dict[str, Any]]) -> Tuple[int, float]:
        """Score (correct count) and percentage over the full ledger"""
        answers = answers or []
        score = sum(1 for answer in answers if answer.get("is_correct"))
        if not answers:
            return score, 0.0
        return score, round(score / len(answers) * 100, 2)


# Global instance
answer_ledger = AnswerLedger()

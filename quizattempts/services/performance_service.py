"""
Performance classification - overall tier plus per-subject strengths and weaknesses
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quizattempts.constants import DEFAULT_AREA_BY_QUESTION_TYPE
from quizattempts.schemas.quiz import QuizDefinition, QuizQuestion
from quizattempts.services.policy import PerformancePolicy

logger = logging.getLogger(__name__)


@dataclass
class PerformanceAnalysis:
    strengths: List[Dict[str, Any]] = field(default_factory=list)
    weaknesses: List[Dict[str, Any]] = field(default_factory=list)
    subject_performance: List[Dict[str, Any]] = field(default_factory=list)
    performance_level: Optional[str] = None


class PerformanceService:
    """
    Groups an attempt's answers into subject areas

    Thresholds (policy defaults):
    - area score >= 75: strength
    - area score < 60: weakness
    - [60, 75): neutral, in neither list

    Areas backed by a single question use the same thresholds. That is
    coarse for small samples and intentionally left that way.
    """

    def __init__(self, policy: Optional[PerformancePolicy] = None):
        self.policy = policy or PerformancePolicy()

    def get_performance_level(self, percentage: float) -> str:
        for minimum, level in self.policy.level_bands:
            if percentage >= minimum:
                return level
        return self.policy.lowest_level

    def resolve_area(self, question: QuizQuestion) -> str:
        if question.subject_area:
            return question.subject_area
        return DEFAULT_AREA_BY_QUESTION_TYPE.get(question.type, "factual_recall")

    def analyze_performance(self, attempt, quiz: QuizDefinition) -> PerformanceAnalysis:
        """
        Aggregate correctness per subject area and classify

        Args:
            attempt: QuizAttempt with a final ledger and percentage
            quiz: Quiz definition supplying each question's area

        Returns:
            PerformanceAnalysis with strengths, weaknesses, every area and level
        """
        totals: Dict[str, Dict[str, int]] = {}

        for answer in attempt.answers or []:
            question = quiz.get_question(answer["question_id"])
            if question is None:
                logger.warning(
                    f"Answer for unknown question {answer['question_id']} on attempt {attempt.id}"
                )
                continue

            area = self.resolve_area(question)
            stats = totals.setdefault(area, {"correct": 0, "total": 0})
            stats["total"] += 1
            if answer.get("is_correct"):
                stats["correct"] += 1

        analysis = PerformanceAnalysis(
            performance_level=self.get_performance_level(float(attempt.percentage or 0))
        )

        for area, stats in totals.items():
            if stats["total"] == 0:
                continue

            area_data = {
                "area": area,
                "score": round(stats["correct"] / stats["total"] * 100, 2),
                "total_questions": stats["total"],
                "correct_answers": stats["correct"],
            }
            analysis.subject_performance.append(area_data)

            if area_data["score"] >= self.policy.strength_threshold:
                analysis.strengths.append(area_data)
            elif area_data["score"] < self.policy.weakness_threshold:
                analysis.weaknesses.append(area_data)

        logger.info(
            f"Performance analysed for attempt {attempt.id}: level={analysis.performance_level}, "
            f"strengths={[a['area'] for a in analysis.strengths]}, "
            f"weaknesses={[a['area'] for a in analysis.weaknesses]}"
        )

        return analysis


# Global instance
performance_service = PerformanceService()

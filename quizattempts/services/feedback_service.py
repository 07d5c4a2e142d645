"""
Feedback generation from performance classification
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quizattempts.constants import MAX_FEEDBACK_LENGTH, PRIORITY_HIGH, PRIORITY_MEDIUM
from quizattempts.services.performance_service import PerformanceService, performance_service
from quizattempts.services.policy import PerformancePolicy

logger = logging.getLogger(__name__)


OVERALL_TEMPLATES = {
    "excellent": "Excellent work! You scored {percentage}% and demonstrated outstanding understanding of the material.",
    "good": "Great job! You scored {percentage}% and have a solid grasp of most concepts with room for minor improvements.",
    "average": "Good effort! You scored {percentage}%. You understand the basics but could benefit from reviewing some areas.",
    "below_average": "You scored {percentage}%. You're making progress, but there are several areas that need more attention.",
    "poor": "You scored {percentage}%. This material requires more study. Focus on understanding the fundamental concepts.",
}


@dataclass
class FeedbackResult:
    overall: str
    improvements: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"overall": self.overall, "improvements": self.improvements}


class FeedbackService:
    """
    Deterministic feedback: same percentage, level and weaknesses always
    produce the same text
    """

    def __init__(
        self,
        policy: Optional[PerformancePolicy] = None,
        classifier: Optional[PerformanceService] = None
    ):
        self.policy = policy or PerformancePolicy()
        self.classifier = classifier or performance_service

    def generate_feedback(self, attempt) -> FeedbackResult:
        percentage = round(float(attempt.percentage or 0), 2)
        level = attempt.performance_level or self.classifier.get_performance_level(percentage)

        template = OVERALL_TEMPLATES.get(level, OVERALL_TEMPLATES["poor"])
        overall = template.format(percentage=f"{percentage:g}")[:MAX_FEEDBACK_LENGTH]

        improvements = [
            {
                "area": weakness["area"],
                "suggestion": (
                    f"Focus on improving your {weakness['area'].replace('_', ' ')} "
                    f"skills through targeted practice."
                ),
                "priority": (
                    PRIORITY_HIGH
                    if weakness["score"] < self.policy.high_priority_threshold
                    else PRIORITY_MEDIUM
                ),
            }
            for weakness in (attempt.weaknesses or [])
        ]

        return FeedbackResult(overall=overall, improvements=improvements)


# Global instance
feedback_service = FeedbackService()

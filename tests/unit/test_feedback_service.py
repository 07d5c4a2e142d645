"""
Tests for feedback generation.
"""
from types import SimpleNamespace

from quizattempts.services.feedback_service import FeedbackService


def make_attempt(percentage, level=None, weaknesses=None):
    return SimpleNamespace(percentage=percentage, performance_level=level, weaknesses=weaknesses or [])


class TestGenerateFeedback:
    def test_overall_uses_level_template(self):
        feedback = FeedbackService().generate_feedback(make_attempt(95.5, "excellent"))
        assert feedback.overall.startswith("Excellent work! You scored 95.5%")

    def test_level_derived_when_missing(self):
        feedback = FeedbackService().generate_feedback(make_attempt(66.67))
        assert feedback.overall.startswith("You scored 66.67%. You're making progress")

    def test_one_improvement_per_weakness(self):
        weaknesses = [
            {"area": "analytical_thinking", "score": 33.33, "total_questions": 3, "correct_answers": 1},
            {"area": "factual_recall", "score": 50.0, "total_questions": 2, "correct_answers": 1},
        ]
        feedback = FeedbackService().generate_feedback(make_attempt(45.0, "poor", weaknesses))

        assert feedback.improvements == [
            {
                "area": "analytical_thinking",
                "suggestion": "Focus on improving your analytical thinking skills through targeted practice.",
                "priority": "high",
            },
            {
                "area": "factual_recall",
                "suggestion": "Focus on improving your factual recall skills through targeted practice.",
                "priority": "medium",
            },
        ]

    def test_priority_boundary_is_medium(self):
        weaknesses = [{"area": "critical_thinking", "score": 40.0}]
        feedback = FeedbackService().generate_feedback(make_attempt(40.0, "poor", weaknesses))
        assert feedback.improvements[0]["priority"] == "medium"

    def test_is_deterministic(self):
        attempt = make_attempt(72.0, "average", [{"area": "factual_recall", "score": 20.0}])
        service = FeedbackService()
        assert service.generate_feedback(attempt).to_dict() == service.generate_feedback(attempt).to_dict()

"""
Database models package
"""
from quizattempts.models.quiz import Quiz
from quizattempts.models.quiz_attempt import QuizAttempt
from quizattempts.models.attempt_event import AttemptEvent

__all__ = ["Quiz", "QuizAttempt", "AttemptEvent"]

"""
Pydantic schemas for quiz attempt requests and responses
"""
from pydantic import BaseModel
from typing import List, Any, Optional
from uuid import UUID
from datetime import datetime


class AttemptStart(BaseModel):
    """Schema for starting (or resuming) an attempt"""
    user_id: UUID


class AnswerSubmission(BaseModel):
    """Schema for a single answer submission"""
    question_id: str
    answer: Any  # Index, boolean or text, validated against the question type
    time_spent_ms: int = 0


class AnswerRecord(BaseModel):
    """One entry of the answer ledger"""
    question_id: str
    user_answer: Any
    is_correct: bool
    points_earned: float
    time_spent: int


class PerformanceArea(BaseModel):
    """Per-subject accuracy within an attempt"""
    area: str
    score: float
    total_questions: int
    correct_answers: int


class Improvement(BaseModel):
    area: str
    suggestion: str
    priority: str


class Feedback(BaseModel):
    overall: str
    improvements: List[Improvement]


class AttemptResponse(BaseModel):
    """Current state of an attempt"""
    attempt_id: UUID
    user_id: UUID
    quiz_id: UUID
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    time_spent: int
    answers: List[AnswerRecord]
    score: int
    percentage: float
    points_earned: int
    performance_level: Optional[str] = None
    is_existing: bool = False

    @classmethod
    def from_model(cls, attempt, is_existing: bool = False) -> "AttemptResponse":
        return cls(
            attempt_id=attempt.id,
            user_id=attempt.user_id,
            quiz_id=attempt.quiz_id,
            status=attempt.status,
            started_at=attempt.started_at,
            completed_at=attempt.completed_at,
            time_spent=attempt.time_spent or 0,
            answers=attempt.answers or [],
            score=attempt.score or 0,
            percentage=float(attempt.percentage or 0),
            points_earned=attempt.points_earned or 0,
            performance_level=attempt.performance_level,
            is_existing=is_existing,
        )


class AnswerResult(BaseModel):
    """Per-question result returned after each submission"""
    question_id: str
    is_correct: bool
    points_earned: float
    correct_answer: Any
    running_score: int
    running_percentage: float
    questions_answered: int
    total_questions: int
    is_quiz_complete: bool


class CompletionResult(BaseModel):
    """Final results returned by the completion step"""
    attempt_id: UUID
    status: str
    score: int
    total_questions: int
    percentage: float
    points_earned: int
    performance_level: str
    time_spent: int
    strengths: List[PerformanceArea]
    weaknesses: List[PerformanceArea]
    feedback: Feedback


class AbandonResult(BaseModel):
    ok: bool = True
    attempt_id: UUID
    status: str
    time_spent: int


class QuestionDetail(BaseModel):
    """Question-level review of a completed attempt"""
    question_id: str
    question: str
    user_answer: Any
    correct_answer: Any
    is_correct: bool
    explanation: str
    points_earned: float
    time_spent: int


class AttemptResults(BaseModel):
    """Detailed results of a completed attempt"""
    attempt_id: UUID
    quiz_id: UUID
    score: int
    total_questions: int
    percentage: float
    accuracy: float
    has_passed: bool
    points_earned: int
    performance_level: Optional[str] = None
    time_spent: int
    time_spent_formatted: str
    completed_at: Optional[datetime] = None
    strengths: List[PerformanceArea]
    weaknesses: List[PerformanceArea]
    feedback: Feedback
    question_details: List[QuestionDetail]

"""
Pydantic schemas for attempt analytics endpoints
"""
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class SubjectMastery(BaseModel):
    """Mastery level for a subject area across completed attempts"""
    area: str
    mastery_percentage: float
    total_questions: int
    correct_answers: int
    attempts: int


class UserQuizStats(BaseModel):
    """Aggregate statistics over a user's completed attempts"""
    user_id: UUID
    total_attempts: int
    average_percentage: float
    best_percentage: float
    total_points_earned: int
    average_time_spent: int
    subject_mastery: List[SubjectMastery]


class AttemptSummary(BaseModel):
    """Row in an attempt listing (per user or per quiz)"""
    attempt_id: UUID
    user_id: UUID
    quiz_id: UUID
    status: str
    score: int
    percentage: float
    points_earned: int
    performance_level: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class LeaderboardEntry(BaseModel):
    """Leaderboard row for one completed attempt"""
    rank: int
    user_id: UUID
    attempt_id: UUID
    percentage: float
    time_spent: int
    points_earned: int
    completed_at: Optional[datetime] = None

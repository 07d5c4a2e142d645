"""
Quiz catalog API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List

from quizattempts.database import get_db
from quizattempts.exceptions import QuizAttemptError
from quizattempts.schemas.quiz import QuizCreate, QuizResponse
from quizattempts.schemas.analytics import AttemptSummary, LeaderboardEntry
from quizattempts.services.quiz_catalog import quiz_catalog
from quizattempts.services.analytics_service import analytics_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizResponse, status_code=201)
async def register_quiz(payload: QuizCreate, db: Session = Depends(get_db)):
    """
    Register a quiz definition produced by the quiz generator

    - Validates question types, answer keys and subject areas
    - Stores the definition; it is immutable afterwards
    """
    try:
        quiz = quiz_catalog.register_quiz(db, payload)
        return QuizResponse.from_definition(quiz)

    except Exception as e:
        logger.error(f"Failed to register quiz: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to register quiz: {str(e)}")


@router.get("/{quiz_id}", response_model=QuizResponse)
async def get_quiz(quiz_id: UUID, db: Session = Depends(get_db)):
    """Get a quiz as shown to quiz takers (answer key omitted)"""
    quiz = quiz_catalog.get_quiz(db, quiz_id)
    return QuizResponse.from_definition(quiz)


@router.get("/{quiz_id}/leaderboard", response_model=List[LeaderboardEntry])
async def get_quiz_leaderboard(quiz_id: UUID, limit: int = 10, db: Session = Depends(get_db)):
    """
    Leaderboard for a quiz

    Completed attempts only, best percentage first, faster time breaking ties
    """
    try:
        quiz_catalog.get_quiz(db, quiz_id)
        entries = analytics_service.get_quiz_leaderboard(db, quiz_id, limit=max(1, min(limit, 100)))
        return [LeaderboardEntry(**entry) for entry in entries]

    except QuizAttemptError:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch leaderboard: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch leaderboard: {str(e)}")


@router.get("/{quiz_id}/attempts", response_model=List[AttemptSummary])
async def list_quiz_attempts(
    quiz_id: UUID,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db)
):
    """Completed attempts for a quiz, best percentage first, then most recent"""
    try:
        quiz_catalog.get_quiz(db, quiz_id)
        attempts = analytics_service.list_quiz_attempts(
            db,
            quiz_id,
            limit=max(1, min(limit, 100)),
            offset=max(0, offset)
        )
        return [AttemptSummary(**a) for a in attempts]

    except QuizAttemptError:
        raise
    except Exception as e:
        logger.error(f"Failed to list quiz attempts: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to list quiz attempts: {str(e)}")

"""
User attempt analytics API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from typing import List, Optional

from quizattempts.database import get_db
from quizattempts.exceptions import QuizAttemptError
from quizattempts.schemas.analytics import UserQuizStats, AttemptSummary
from quizattempts.services.analytics_service import analytics_service

router = APIRouter(prefix="/api", tags=["analytics"])
logger = logging.getLogger(__name__)


@router.get("/users/{user_id}/quiz-stats", response_model=UserQuizStats)
async def get_user_quiz_stats(
    user_id: UUID,
    db: Session = Depends(get_db)
):
    """
    Get quiz statistics for a user

    Returns:
    - Completed attempts, average and best percentage
    - Total points earned and average time spent
    - Subject mastery across attempts
    """

    try:
        logger.info(f"Fetching quiz stats for user {user_id}")

        stats = analytics_service.get_user_stats(db, user_id)

        return UserQuizStats(**stats)

    except Exception as e:
        logger.error(f"Failed to fetch user quiz stats: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch quiz stats: {str(e)}"
        )


@router.get("/users/{user_id}/attempts", response_model=List[AttemptSummary])
async def list_user_attempts(
    user_id: UUID,
    status: Optional[str] = None,
    include_abandoned: bool = False,
    limit: int = 20,
    offset: int = 0,
    db: Session = Depends(get_db)
):
    """
    List a user's attempts, newest first

    Abandoned attempts are hidden unless requested or filtered for
    """

    try:
        attempts = analytics_service.list_user_attempts(
            db,
            user_id,
            status=status,
            include_abandoned=include_abandoned,
            limit=max(1, min(limit, 100)),
            offset=max(0, offset)
        )

        return [AttemptSummary(**a) for a in attempts]

    except QuizAttemptError:
        raise
    except Exception as e:
        logger.error(f"Failed to list attempts: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list attempts: {str(e)}"
        )

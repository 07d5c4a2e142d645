"""
Quiz attempt API endpoints - start, answer, complete, abandon
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from quizattempts.database import get_db
from quizattempts.exceptions import QuizAttemptError
from quizattempts.schemas.attempt import (
    AttemptStart,
    AttemptResponse,
    AnswerSubmission,
    AnswerResult,
    CompletionResult,
    AbandonResult,
    AttemptResults,
)
from quizattempts.services.attempt_service import attempt_service
from quizattempts.services.analytics_service import analytics_service


router = APIRouter(prefix="/api", tags=["attempts"])
logger = logging.getLogger(__name__)


@router.post("/quizzes/{quiz_id}/attempts", response_model=AttemptResponse, status_code=201)
async def start_attempt(
    quiz_id: UUID, request: AttemptStart, response: Response, db: Session = Depends(get_db)
):
    """
    Start a quiz attempt

    - Returns the user's in-progress attempt for this quiz if one exists (200)
    - Otherwise creates a new attempt (201)
    """
    attempt, is_existing = attempt_service.start(db, quiz_id, request.user_id)

    if is_existing:
        response.status_code = 200

    return AttemptResponse.from_model(attempt, is_existing=is_existing)


@router.get("/attempts/{attempt_id}", response_model=AttemptResponse)
async def get_attempt(attempt_id: UUID, db: Session = Depends(get_db)):
    """Current state of an attempt"""
    attempt = attempt_service.get_attempt(db, attempt_id)
    return AttemptResponse.from_model(attempt)


@router.put("/attempts/{attempt_id}/answers", response_model=AnswerResult)
async def submit_answer(
    attempt_id: UUID, submission: AnswerSubmission, db: Session = Depends(get_db)
):
    """
    Submit (or resubmit) the answer to one question

    Grading rules:
    - multiple_choice: exact option index
    - true_false: boolean equality
    - fill_in_blank / short_answer: case-insensitive trimmed match

    A resubmission replaces the earlier answer; the running score is
    recomputed from all stored answers.
    """
    try:
        result = attempt_service.submit_answer(
            db,
            attempt_id,
            submission.question_id,
            submission.answer,
            submission.time_spent_ms,
        )
        return AnswerResult(**result)

    except QuizAttemptError:
        raise
    except Exception as e:
        logger.error(f"Failed to submit answer: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to submit answer: {str(e)}")


@router.post("/attempts/{attempt_id}/complete", response_model=CompletionResult)
async def complete_attempt(attempt_id: UUID, db: Session = Depends(get_db)):
    """
    Complete an attempt

    Returns:
    - Score, percentage and performance level
    - Points earned (difficulty and time adjusted)
    - Strengths, weaknesses and feedback
    """
    try:
        result = attempt_service.complete(db, attempt_id)
        return CompletionResult(**result)

    except QuizAttemptError:
        raise
    except Exception as e:
        logger.error(f"Failed to complete attempt: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to complete attempt: {str(e)}")


@router.post("/attempts/{attempt_id}/abandon", response_model=AbandonResult)
async def abandon_attempt(attempt_id: UUID, db: Session = Depends(get_db)):
    """Abandon an attempt; no points or feedback are produced"""
    attempt = attempt_service.abandon(db, attempt_id)

    return AbandonResult(
        attempt_id=attempt.id,
        status=attempt.status,
        time_spent=attempt.time_spent,
    )


@router.get("/attempts/{attempt_id}/results", response_model=AttemptResults)
async def get_attempt_results(attempt_id: UUID, db: Session = Depends(get_db)):
    """Detailed results of a completed attempt, question by question"""
    results = analytics_service.get_attempt_results(db, attempt_id)
    return AttemptResults(**results)

"""
Domain errors raised by the attempt lifecycle and scoring engine

Every error carries a machine-readable code and the HTTP status the API
layer maps it to. None of them are retried automatically, except that
ConcurrencyConflictError is safe for the caller to retry once.
"""
from typing import Optional


class QuizAttemptError(Exception):
    """Base class for all domain errors"""

    error = "quiz_attempt_error"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.field:
            body["field"] = self.field
        return body


class InvalidStateError(QuizAttemptError):
    """Operation not allowed in the attempt's current status"""
    error = "invalid_state"
    status_code = 409


class QuestionNotFoundError(QuizAttemptError):
    error = "question_not_found"
    status_code = 404


class ValidationError(QuizAttemptError):
    """Malformed input; `field` names the offending value"""
    error = "validation_error"
    status_code = 422


class ConcurrencyConflictError(QuizAttemptError):
    """Optimistic lock failure, retry once with refreshed state"""
    error = "concurrency_conflict"
    status_code = 409


class AttemptNotFoundError(QuizAttemptError):
    error = "attempt_not_found"
    status_code = 404


class QuizNotFoundError(QuizAttemptError):
    error = "quiz_not_found"
    status_code = 404

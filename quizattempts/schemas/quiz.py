"""
Pydantic schemas for quiz catalog definitions
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Any, Optional
from uuid import UUID

from quizattempts.constants import (
    DIFFICULTY_LEVELS,
    QUESTION_TYPES,
    SUBJECT_AREAS,
    MAX_TEXT_LENGTH,
    MULTIPLE_CHOICE,
    TRUE_FALSE,
)


class QuizQuestion(BaseModel):
    """Individual quiz question with its authoritative answer key"""
    question_id: str = Field(..., min_length=1, max_length=64)
    type: str
    question: str = Field("", max_length=500)
    options: Optional[List[str]] = None  # multiple_choice / true_false
    correct_answer: Any  # Index, boolean or text depending on type
    subject_area: Optional[str] = None
    weight: float = Field(1.0, gt=0, le=100)
    explanation: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if value not in QUESTION_TYPES:
            raise ValueError(f"type must be one of {', '.join(QUESTION_TYPES)}")
        return value

    @field_validator("subject_area")
    @classmethod
    def validate_subject_area(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in SUBJECT_AREAS:
            raise ValueError(f"subject_area must be one of {', '.join(SUBJECT_AREAS)}")
        return value

    @model_validator(mode="after")
    def validate_answer_key(self):
        if self.type == MULTIPLE_CHOICE:
            if not self.options or len(self.options) < 2:
                raise ValueError("multiple_choice questions need at least 2 options")
            if isinstance(self.correct_answer, bool) or not isinstance(self.correct_answer, int):
                raise ValueError("multiple_choice correct_answer must be an option index")
            if not 0 <= self.correct_answer < len(self.options):
                raise ValueError("multiple_choice correct_answer is out of range")
        elif self.type == TRUE_FALSE:
            if not isinstance(self.correct_answer, bool):
                raise ValueError("true_false correct_answer must be a boolean")
        else:
            if not isinstance(self.correct_answer, str) or not self.correct_answer.strip():
                raise ValueError(f"{self.type} correct_answer must be non-empty text")
            # Answers are held to the same limit, so a longer key is unanswerable
            max_length = MAX_TEXT_LENGTH[self.type]
            if len(self.correct_answer.strip()) > max_length:
                raise ValueError(
                    f"{self.type} correct_answer must be at most {max_length} characters"
                )
        return self


class QuizCreate(BaseModel):
    """Quiz definition pushed by the quiz generator"""
    title: str = Field("", max_length=150)
    difficulty: str = "medium"
    estimated_time_minutes: int = Field(15, ge=1, le=180)
    questions: List[QuizQuestion] = Field(..., min_length=1, max_length=50)

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, value: str) -> str:
        if value not in DIFFICULTY_LEVELS:
            raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTY_LEVELS)}")
        return value

    @model_validator(mode="after")
    def validate_unique_question_ids(self):
        ids = [q.question_id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError("question_id values must be unique within a quiz")
        return self


class QuizDefinition(QuizCreate):
    """Read-only view of a catalog quiz used by the scoring engine"""
    id: UUID

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def estimated_time_ms(self) -> int:
        return self.estimated_time_minutes * 60 * 1000

    def get_question(self, question_id: str) -> Optional[QuizQuestion]:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None

    @classmethod
    def from_model(cls, quiz) -> "QuizDefinition":
        return cls(
            id=quiz.id,
            title=quiz.title or "",
            difficulty=quiz.difficulty,
            estimated_time_minutes=quiz.estimated_time_minutes,
            questions=quiz.questions,
        )


class QuizQuestionPublic(BaseModel):
    """Question as shown to a quiz taker (no answer key)"""
    question_id: str
    type: str
    question: str
    options: Optional[List[str]] = None
    weight: float = 1.0


class QuizResponse(BaseModel):
    """Response containing a catalog quiz"""
    quiz_id: UUID
    title: str
    difficulty: str
    estimated_time_minutes: int
    total_questions: int
    questions: List[QuizQuestionPublic]

    @classmethod
    def from_definition(cls, quiz: QuizDefinition) -> "QuizResponse":
        return cls(
            quiz_id=quiz.id,
            title=quiz.title,
            difficulty=quiz.difficulty,
            estimated_time_minutes=quiz.estimated_time_minutes,
            total_questions=quiz.total_questions,
            questions=[QuizQuestionPublic(**q.model_dump()) for q in quiz.questions],
        )

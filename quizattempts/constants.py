"""
Enumerated values shared by models, schemas and services
"""

# Attempt status values
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_ABANDONED = "abandoned"

ATTEMPT_STATUSES = (STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_ABANDONED)

# Question types
MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
FILL_IN_BLANK = "fill_in_blank"
SHORT_ANSWER = "short_answer"

QUESTION_TYPES = (MULTIPLE_CHOICE, TRUE_FALSE, FILL_IN_BLANK, SHORT_ANSWER)

# Quiz difficulty
DIFFICULTY_LEVELS = ("easy", "medium", "hard", "mixed")

# Subject areas used for strengths/weaknesses
SUBJECT_AREAS = (
    "factual_recall",
    "conceptual_understanding",
    "procedural_knowledge",
    "analytical_thinking",
    "critical_evaluation",
    "critical_thinking",
)

# Area assumed for a question that does not declare one
DEFAULT_AREA_BY_QUESTION_TYPE = {
    MULTIPLE_CHOICE: "factual_recall",
    TRUE_FALSE: "conceptual_understanding",
    FILL_IN_BLANK: "procedural_knowledge",
    SHORT_ANSWER: "analytical_thinking",
}

# Improvement priorities
PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"

# Outbox event types
EVENT_POINTS_AWARDED = "points_awarded"
EVENT_QUIZ_COMPLETED = "quiz_completed"

# Bounds
MAX_TIME_SPENT_MS = 24 * 60 * 60 * 1000
MAX_FEEDBACK_LENGTH = 1000

# Longest accepted text answer, per question type
MAX_TEXT_LENGTH = {
    FILL_IN_BLANK: 100,
    SHORT_ANSWER: 500,
}

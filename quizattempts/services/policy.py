"""
Scoring policy - tunable thresholds and multipliers

Product rules change independently of the scoring mechanics, so every
threshold, band and multiplier used by the classifier, the points calculator
and the feedback generator is read from these objects instead of being
inlined in the algorithms.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

from quizattempts.config import settings


@dataclass(frozen=True)
class PerformancePolicy:
    """Performance level bands and strength/weakness thresholds"""

    # (minimum percentage, level), highest band first
    level_bands: Tuple[Tuple[float, str], ...] = (
        (90.0, "excellent"),
        (80.0, "good"),
        (70.0, "average"),
        (60.0, "below_average"),
    )
    lowest_level: str = "poor"

    # Area score >= strength_threshold is a strength, < weakness_threshold a weakness
    strength_threshold: float = 75.0
    weakness_threshold: float = 60.0

    # Weak areas below this score get a high-priority improvement
    high_priority_threshold: float = 40.0


@dataclass(frozen=True)
class PointsPolicy:
    """
    Reward points formula:

        points = points_per_correct * score
                 * difficulty multiplier
                 * time-efficiency factor

    The time-efficiency factor is 1 + max_time_bonus at or under the
    estimated time, 1 - max_time_penalty at penalty_time_ratio times the
    estimate or slower, and linear in between. The result is rounded half up
    and clamped to [0, max_points].
    """

    points_per_correct: int = 10
    difficulty_multipliers: Dict[str, float] = field(
        default_factory=lambda: {"easy": 1.0, "medium": 1.5, "hard": 2.0}
    )
    default_difficulty_multiplier: float = 1.0
    max_time_bonus: float = 0.2
    max_time_penalty: float = 0.2
    penalty_time_ratio: float = 2.0
    max_points: int = 1000

    @classmethod
    def from_settings(cls) -> "PointsPolicy":
        return cls(
            points_per_correct=settings.POINTS_PER_CORRECT,
            max_points=settings.MAX_POINTS_PER_ATTEMPT,
        )

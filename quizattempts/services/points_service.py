"""
Reward points calculation for completed attempts
"""
import logging
import math
from typing import Optional

from quizattempts.services.policy import PointsPolicy

logger = logging.getLogger(__name__)


class PointsService:
    """
    Converts score, difficulty and timing into awarded points

    Formula and constants live in PointsPolicy. With the defaults a medium
    quiz answered 2/3 correctly within the estimated time earns
    10 * 2 * 1.5 * 1.2 = 36 points.
    """

    def __init__(self, policy: Optional[PointsPolicy] = None):
        self.policy = policy or PointsPolicy.from_settings()

    def calculate_points(
        self,
        score: int,
        total_questions: int,
        difficulty: str,
        time_spent_ms: int,
        estimated_time_ms: int
    ) -> int:
        """
        Calculate points for an attempt

        Args:
            score: Number of correct answers
            total_questions: Questions in the quiz
            difficulty: Quiz difficulty (easy/medium/hard/mixed)
            time_spent_ms: Attempt duration in milliseconds
            estimated_time_ms: Quiz time estimate in milliseconds

        Returns:
            Non-negative integer, at most policy.max_points
        """
        if total_questions <= 0 or score <= 0:
            return 0

        score = min(score, total_questions)

        base_points = self.policy.points_per_correct * score
        multiplier = self.policy.difficulty_multipliers.get(
            difficulty, self.policy.default_difficulty_multiplier
        )
        time_factor = self.time_efficiency_factor(time_spent_ms, estimated_time_ms)

        raw_points = base_points * multiplier * time_factor
        # Round half up
        points = int(math.floor(raw_points + 0.5))
        points = max(0, min(points, self.policy.max_points))

        logger.debug(
            f"Points: base={base_points}, difficulty={difficulty}x{multiplier}, "
            f"time_factor={time_factor:.3f}, points={points}"
        )
        return points

    def time_efficiency_factor(self, time_spent_ms: int, estimated_time_ms: int) -> float:
        """
        Bounded multiplier for completion speed

        - at or under the estimate: 1 + max_time_bonus
        - at penalty_time_ratio x estimate or slower: 1 - max_time_penalty
        - linear in between
        """
        if not estimated_time_ms or estimated_time_ms <= 0:
            return 1.0

        ceiling = 1.0 + self.policy.max_time_bonus
        floor = 1.0 - self.policy.max_time_penalty
        ratio = max(time_spent_ms or 0, 0) / estimated_time_ms

        if ratio <= 1.0:
            return ceiling
        if ratio >= self.policy.penalty_time_ratio:
            return floor

        progress = (ratio - 1.0) / (self.policy.penalty_time_ratio - 1.0)
        return ceiling - progress * (ceiling - floor)


# Global instance
points_service = PointsService()

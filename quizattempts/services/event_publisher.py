"""
Outbox events for the points ledger and the subject-profile collaborators

PointsAwarded and QuizCompleted rows are written in the completion
transaction. Delivery to Redis happens afterwards; rows stay pending until
pushed, so every event is delivered at least once.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis
from sqlalchemy.orm import Session

from quizattempts.config import settings
from quizattempts.constants import EVENT_POINTS_AWARDED, EVENT_QUIZ_COMPLETED
from quizattempts.models import AttemptEvent
from quizattempts.utils.cache import cache_service

logger = logging.getLogger(__name__)


def points_awarded_event(attempt) -> AttemptEvent:
    return AttemptEvent(
        event_type=EVENT_POINTS_AWARDED,
        attempt_id=attempt.id,
        user_id=attempt.user_id,
        payload={
            "user_id": str(attempt.user_id),
            "attempt_id": str(attempt.id),
            "amount": attempt.points_earned,
        },
    )


def quiz_completed_event(attempt, subject_performance: List[Dict[str, Any]]) -> AttemptEvent:
    return AttemptEvent(
        event_type=EVENT_QUIZ_COMPLETED,
        attempt_id=attempt.id,
        user_id=attempt.user_id,
        payload={
            "user_id": str(attempt.user_id),
            "quiz_id": str(attempt.quiz_id),
            "percentage": float(attempt.percentage),
            "subject_performance": subject_performance,
        },
    )


class EventPublisher:
    """Pushes pending outbox rows onto a Redis list"""

    def __init__(self, redis_client=None, key: Optional[str] = None):
        self._redis_client = redis_client
        self.key = key or settings.EVENTS_REDIS_KEY

    @property
    def redis_client(self):
        return self._redis_client or cache_service.redis_client

    def serialize(self, event: AttemptEvent) -> str:
        return json.dumps({
            "id": str(event.id),
            "type": event.event_type,
            "attempt_id": str(event.attempt_id),
            "payload": event.payload,
        })

    def publish_pending(self, db: Session, limit: int = 100) -> int:
        """
        Deliver pending events, oldest first

        Returns:
            Number of events delivered
        """
        client = self.redis_client
        if client is None:
            logger.debug("No event transport configured; events left pending")
            return 0

        pending = (
            db.query(AttemptEvent)
            .filter(AttemptEvent.published_at.is_(None))
            .order_by(AttemptEvent.created_at)
            .limit(limit)
            .all()
        )

        published = 0
        for event in pending:
            try:
                client.rpush(self.key, self.serialize(event))
            except redis.RedisError as e:
                logger.warning(f"Event delivery failed, {len(pending) - published} left pending: {str(e)}")
                break
            event.published_at = datetime.now(timezone.utc).replace(tzinfo=None)
            published += 1

        if published:
            db.commit()
            logger.info(f"Published {published} attempt events")

        return published

    def drain(self, db: Session, batch_size: int = 100) -> int:
        """
        Deliver every pending event in batches

        Stops at the first short batch, which covers both an empty outbox
        and a transport failure partway through.
        """
        total = 0
        while True:
            published = self.publish_pending(db, limit=batch_size)
            total += published
            if published < batch_size:
                return total


# Global instance
event_publisher = EventPublisher()

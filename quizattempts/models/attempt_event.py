"""
AttemptEvent model - transactional outbox for events emitted on completion
"""
from sqlalchemy import Column, String, TIMESTAMP, JSON, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from quizattempts.database import Base
import uuid


class AttemptEvent(Base):
    """
    Attempt events table - written in the same transaction as the completion,
    delivered to the points ledger / profile collaborators afterwards.
    Rows with published_at = NULL are still pending.
    """
    __tablename__ = "attempt_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_type = Column(String(40), nullable=False, index=True)
    attempt_id = Column(Uuid, nullable=False, index=True)
    user_id = Column(Uuid, nullable=False)
    payload = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    published_at = Column(TIMESTAMP, nullable=True, index=True)

    def __repr__(self):
        return f"<AttemptEvent(type={self.event_type}, attempt_id={self.attempt_id}, published={self.published_at is not None})>"

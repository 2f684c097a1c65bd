import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Index, Uuid

from .base import Base, utcnow


class StoredEvent(Base):
    """
    Append-only log of domain events emitted by the owning service.

    Rows are written in the same transaction as the state change that
    produced the event and are never updated or deleted.
    """
    __tablename__ = 'stored_events'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Text, nullable=False, unique=True)
    event_type = Column(Text, nullable=False)  # fully-qualified type name
    data = Column(Text, nullable=False)  # JSON payload
    occurred_on = Column(TIMESTAMP(timezone=True), nullable=False)
    recorded_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_stored_events_occurred_on', 'occurred_on'),
        Index('idx_stored_events_type', 'event_type'),
    )

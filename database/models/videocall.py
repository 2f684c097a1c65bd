from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class CallSession(Base):
    """A video call between the two parties of a match."""
    __tablename__ = 'call_sessions'

    id = Column(Text, primary_key=True, default=new_id)
    match_id = Column(Text, nullable=True)
    initiator_user_id = Column(Text, nullable=False)
    participant_user_id = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='Pending')  # Pending, Active, Ended
    started_at = Column(TIMESTAMP(timezone=True), nullable=True)
    ended_at = Column(TIMESTAMP(timezone=True), nullable=True)
    end_reason = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    participants = relationship("CallParticipant", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_call_sessions_match', 'match_id'),
        Index('idx_call_sessions_status', 'status'),
    )


class CallParticipant(Base):
    """A user's presence in a call session."""
    __tablename__ = 'call_participants'

    id = Column(Text, primary_key=True, default=new_id)
    session_id = Column(Text, ForeignKey('call_sessions.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Text, nullable=False)
    joined_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    left_at = Column(TIMESTAMP(timezone=True), nullable=True)

    session = relationship("CallSession", back_populates="participants")

    __table_args__ = (
        Index('idx_call_participants_user', 'user_id'),
    )

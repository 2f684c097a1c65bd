from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Integer, Index

from .base import Base, new_id, utcnow


class Appointment(Base):
    """
    A scheduled learning/exchange session.

    The first appointment of a match is created when the match is accepted.
    """
    __tablename__ = 'appointments'

    id = Column(Text, primary_key=True, default=new_id)
    match_id = Column(Text, nullable=True)
    organizer_user_id = Column(Text, nullable=False)
    participant_user_id = Column(Text, nullable=False)
    skill_id = Column(Text, nullable=True)

    title = Column(Text, nullable=False)
    scheduled_date = Column(TIMESTAMP(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    meeting_type = Column(Text, nullable=False, default='Learning')  # Learning, Exchange
    is_skill_exchange = Column(Boolean, nullable=False, default=False)

    session_number = Column(Integer, nullable=False, default=1)
    total_sessions = Column(Integer, nullable=False, default=1)

    status = Column(Text, nullable=False, default='Confirmed')  # Confirmed, Cancelled, Completed
    cancellation_reason = Column(Text, nullable=True)
    created_by = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_appointments_match', 'match_id'),
        Index('idx_appointments_organizer', 'organizer_user_id'),
        Index('idx_appointments_participant', 'participant_user_id'),
        Index('idx_appointments_status', 'status'),
    )

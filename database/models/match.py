from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Integer, Float, JSON, Index

from .base import Base, new_id, utcnow


class MatchRequest(Base):
    """
    A request from one user to learn (or exchange) a skill offered by another.

    Owned by the matchmaking service. Removed by cascade when either user or
    the requested skill is deleted.
    """
    __tablename__ = 'match_requests'

    id = Column(Text, primary_key=True, default=new_id)
    requester_id = Column(Text, nullable=False)
    target_user_id = Column(Text, nullable=False)
    skill_id = Column(Text, nullable=False)

    is_skill_exchange = Column(Boolean, nullable=False, default=False)
    exchange_skill_id = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default='Pending')
    message = Column(Text, nullable=True)
    thread_id = Column(Text, nullable=True)

    preferred_days = Column(JSON, nullable=False, default=list)
    preferred_times = Column(JSON, nullable=False, default=list)

    session_duration_minutes = Column(Integer, nullable=True)
    total_sessions = Column(Integer, nullable=False, default=1)

    expires_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_match_requests_requester', 'requester_id'),
        Index('idx_match_requests_target', 'target_user_id'),
        Index('idx_match_requests_skill', 'skill_id'),
        Index('idx_match_requests_status', 'status'),
        Index('idx_match_requests_thread', 'thread_id'),
    )


class Match(Base):
    """
    A pairing between an offering user and a requesting user.

    Status follows Pending -> Accepted/Rejected/Expired and
    Accepted -> Completed/Dissolved; see core.matching.lifecycle.
    """
    __tablename__ = 'matches'

    id = Column(Text, primary_key=True, default=new_id)
    offering_user_id = Column(Text, nullable=False)
    requesting_user_id = Column(Text, nullable=False)
    offered_skill_id = Column(Text, nullable=False)
    requested_skill_id = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default='Pending')
    compatibility_score = Column(Float, nullable=False, default=0.0)
    score_components = Column(JSON, nullable=False, default=dict)

    is_skill_exchange = Column(Boolean, nullable=False, default=False)
    exchange_skill_id = Column(Text, nullable=True)

    agreed_days = Column(JSON, nullable=False, default=list)
    agreed_times = Column(JSON, nullable=False, default=list)
    session_duration_minutes = Column(Integer, nullable=True)
    total_sessions_planned = Column(Integer, nullable=False, default=1)

    original_request_id = Column(Text, nullable=True)
    thread_id = Column(Text, nullable=True)

    accepted_at = Column(TIMESTAMP(timezone=True), nullable=True)
    rejected_at = Column(TIMESTAMP(timezone=True), nullable=True)
    expired_at = Column(TIMESTAMP(timezone=True), nullable=True)
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    dissolved_at = Column(TIMESTAMP(timezone=True), nullable=True)

    rejection_reason = Column(Text, nullable=True)
    completion_notes = Column(Text, nullable=True)
    dissolution_reason = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_matches_offering_user', 'offering_user_id'),
        Index('idx_matches_requesting_user', 'requesting_user_id'),
        Index('idx_matches_status', 'status'),
        Index('idx_matches_status_created', 'status', 'created_at'),
        Index('idx_matches_thread', 'thread_id'),
    )

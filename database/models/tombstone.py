from sqlalchemy import Column, Text, TIMESTAMP

from .base import Base, utcnow


class ClosedMatch(Base):
    """
    Marks a match the consuming service has already seen end.

    A delivery retried after a later event (e.g. MatchAccepted redelivered
    after MatchDissolved) checks this before creating anything for the match.
    Holds no user data, so user deletion cascades leave it in place.
    """
    __tablename__ = 'closed_matches'

    match_id = Column(Text, primary_key=True)
    status = Column(Text, nullable=False)  # Dissolved
    closed_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

from sqlalchemy import Column, Text, Boolean, Float, TIMESTAMP, Index

from .base import Base, new_id, utcnow


class User(Base):
    """User account owned by the accounts service."""
    __tablename__ = 'users'

    id = Column(Text, primary_key=True, default=new_id)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text)
    rating = Column(Float, nullable=False, default=0.0)  # 0-5
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )


class Skill(Base):
    """A skill a user offers or wants to learn."""
    __tablename__ = 'skills'

    id = Column(Text, primary_key=True, default=new_id)
    user_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    is_offered = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_skills_user', 'user_id'),
    )

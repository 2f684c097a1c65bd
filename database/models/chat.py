from sqlalchemy import Column, Text, TIMESTAMP, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class ChatThread(Base):
    """Conversation between the two users of a match."""
    __tablename__ = 'chat_threads'

    id = Column(Text, primary_key=True, default=new_id)
    thread_id = Column(Text, nullable=False, unique=True)
    match_id = Column(Text, nullable=True, unique=True)
    participant1_id = Column(Text, nullable=False)
    participant2_id = Column(Text, nullable=False)
    skill_id = Column(Text, nullable=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    lock_reason = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    messages = relationship("ChatMessage", back_populates="thread", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_chat_threads_p1', 'participant1_id'),
        Index('idx_chat_threads_p2', 'participant2_id'),
    )


class ChatMessage(Base):
    __tablename__ = 'chat_messages'

    id = Column(Text, primary_key=True, default=new_id)
    thread_pk = Column(Text, ForeignKey('chat_threads.id', ondelete='CASCADE'), nullable=False)
    sender_id = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    sent_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    thread = relationship("ChatThread", back_populates="messages")

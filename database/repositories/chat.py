import logging
from typing import List, Optional

from sqlalchemy import select, or_

from database.models import ChatThread, ChatMessage
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ChatThreadRepository(BaseRepository):
    def get_by_match_id(self, match_id: str) -> Optional[ChatThread]:
        stmt = select(ChatThread).where(ChatThread.match_id == match_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_thread_id(self, thread_id: str) -> Optional[ChatThread]:
        stmt = select(ChatThread).where(ChatThread.thread_id == thread_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def add_thread(self, thread: ChatThread) -> ChatThread:
        return self._persist(thread)

    def add_message(self, thread: ChatThread, sender_id: str, content: str) -> ChatMessage:
        message = ChatMessage(thread=thread, sender_id=sender_id, content=content)
        return self._persist(message)

    def get_threads_for_user(self, user_id: str) -> List[ChatThread]:
        stmt = select(ChatThread).where(
            or_(ChatThread.participant1_id == user_id, ChatThread.participant2_id == user_id)
        )
        return self.db.execute(stmt).scalars().all()

    def lock_thread_for_match(self, match_id: str, reason: str) -> bool:
        thread = self.get_by_match_id(match_id)
        if thread is None or thread.is_locked:
            return False
        thread.is_locked = True
        thread.lock_reason = reason
        logger.info(f"Locked chat thread {thread.thread_id} for match {match_id}")
        return True

    def delete_threads_for_user(self, user_id: str) -> int:
        threads = self.get_threads_for_user(user_id)

        count = 0
        for thread in threads:
            self.db.delete(thread)  # messages go with the thread
            count += 1

        if count > 0:
            logger.info(f"Deleted {count} chat threads for user {user_id}")

        return count

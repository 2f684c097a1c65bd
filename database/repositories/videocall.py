import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from database.models import CallSession, CallParticipant
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CallRepository(BaseRepository):
    def add_session(self, session: CallSession) -> CallSession:
        return self._persist(session)

    def add_participant(self, participant: CallParticipant) -> CallParticipant:
        return self._persist(participant)

    def get_session(self, session_id: str) -> Optional[CallSession]:
        return self.db.get(CallSession, session_id)

    def get_participants_for_user(self, user_id: str) -> List[CallParticipant]:
        stmt = select(CallParticipant).where(CallParticipant.user_id == user_id)
        return self.db.execute(stmt).scalars().all()

    def delete_participants_for_user(self, user_id: str) -> int:
        participants = self.get_participants_for_user(user_id)

        count = 0
        for participant in participants:
            self.db.delete(participant)
            count += 1

        if count > 0:
            logger.info(f"Deleted {count} call participants for user {user_id}")

        return count

    def end_active_sessions_for_match(self, match_id: str, reason: str, ended_at: datetime) -> int:
        stmt = select(CallSession).where(
            CallSession.match_id == match_id,
            CallSession.status.in_(('Pending', 'Active'))
        )
        sessions = self.db.execute(stmt).scalars().all()

        count = 0
        for session in sessions:
            session.status = 'Ended'
            session.ended_at = ended_at
            session.end_reason = reason
            count += 1

        if count > 0:
            logger.info(f"Ended {count} call sessions for match {match_id}: {reason}")

        return count

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, or_

from database.models import Match, MatchRequest
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

ACTIVE_MATCH_STATUSES = ('Pending', 'Accepted')


class MatchRepository(BaseRepository):
    # ---- Match requests ----

    def add_request(self, request: MatchRequest) -> MatchRequest:
        return self._persist(request)

    def get_request(self, request_id: str) -> Optional[MatchRequest]:
        return self.db.get(MatchRequest, request_id)

    def has_pending_request(self, requester_id: str, target_user_id: str, skill_id: str) -> bool:
        stmt = select(MatchRequest.id).where(
            MatchRequest.requester_id == requester_id,
            MatchRequest.target_user_id == target_user_id,
            MatchRequest.skill_id == skill_id,
            MatchRequest.status == 'Pending'
        )
        return self.db.execute(stmt).first() is not None

    def get_requests_for_user(self, user_id: str) -> List[MatchRequest]:
        stmt = select(MatchRequest).where(
            or_(MatchRequest.requester_id == user_id, MatchRequest.target_user_id == user_id)
        )
        return self.db.execute(stmt).scalars().all()

    def delete_requests_for_user(self, user_id: str) -> int:
        """Delete every request the user sent or received. Safe to repeat."""
        requests = self.get_requests_for_user(user_id)

        count = 0
        for request in requests:
            self.db.delete(request)
            count += 1

        if count > 0:
            logger.info(f"Deleted {count} match requests for user {user_id}")

        return count

    def delete_pending_requests_for_skill(self, skill_id: str) -> int:
        stmt = select(MatchRequest).where(
            or_(MatchRequest.skill_id == skill_id, MatchRequest.exchange_skill_id == skill_id),
            MatchRequest.status == 'Pending'
        )
        requests = self.db.execute(stmt).scalars().all()

        count = 0
        for request in requests:
            self.db.delete(request)
            count += 1

        if count > 0:
            logger.info(f"Deleted {count} pending match requests for skill {skill_id}")

        return count

    # ---- Matches ----

    def add_match(self, match: Match) -> Match:
        return self._persist(match)

    def get_match(self, match_id: str) -> Optional[Match]:
        return self.db.get(Match, match_id)

    def get_active_matches_for_user(self, user_id: str) -> List[Match]:
        stmt = select(Match).where(
            or_(Match.offering_user_id == user_id, Match.requesting_user_id == user_id),
            Match.status.in_(ACTIVE_MATCH_STATUSES)
        )
        return self.db.execute(stmt).scalars().all()

    def get_matches_for_user(
        self,
        user_id: str,
        min_score: Optional[float] = None,
        status: Optional[str] = None
    ) -> List[Match]:
        stmt = select(Match).where(
            or_(Match.offering_user_id == user_id, Match.requesting_user_id == user_id)
        )

        if status is not None:
            stmt = stmt.where(Match.status == status)

        if min_score is not None:
            stmt = stmt.where(Match.compatibility_score >= min_score)

        stmt = stmt.order_by(Match.compatibility_score.desc())
        return self.db.execute(stmt).scalars().all()

    def get_pending_matches_created_before(self, cutoff: datetime, limit: int = 500) -> List[Match]:
        stmt = select(Match).where(
            Match.status == 'Pending',
            Match.created_at < cutoff
        ).order_by(Match.created_at).limit(limit)
        return self.db.execute(stmt).scalars().all()

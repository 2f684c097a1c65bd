import logging
from datetime import datetime

from database.models import ClosedMatch
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ClosedMatchRepository(BaseRepository):
    def is_closed(self, match_id: str) -> bool:
        return self.db.get(ClosedMatch, match_id) is not None

    def mark_closed(self, match_id: str, status: str, closed_at: datetime) -> bool:
        """Record that a match ended. Returns False if it was already recorded."""
        if self.is_closed(match_id):
            return False
        self._persist(ClosedMatch(match_id=match_id, status=status, closed_at=closed_at))
        logger.debug(f"Marked match {match_id} as {status}")
        return True

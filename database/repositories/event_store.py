import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from core.events import DomainEvent, deserialize_event, serialize_event, ensure_utc
from database.models import StoredEvent
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class EventStoreRepository(BaseRepository):
    """
    Append-only event log for one service store.

    append() is idempotent on event_id; replay() returns events ordered by
    occurred_on (ties broken by event_id) so repeated replays are identical.
    """

    def exists(self, event_id: str) -> bool:
        stmt = select(StoredEvent.id).where(StoredEvent.event_id == event_id)
        return self.db.execute(stmt).first() is not None

    def append(self, event: DomainEvent) -> bool:
        """Persist an event in the current transaction. Returns False if already stored."""
        if self.exists(event.event_id):
            logger.debug(f"Event {event.event_id} already stored, skipping")
            return False

        record = StoredEvent(
            event_id=event.event_id,
            event_type=event.event_type(),
            data=serialize_event(event),
            occurred_on=event.occurred_on,
        )
        self._persist(record)
        return True

    def get_record(self, event_id: str) -> Optional[StoredEvent]:
        stmt = select(StoredEvent).where(StoredEvent.event_id == event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get(self, event_id: str) -> Optional[DomainEvent]:
        record = self.get_record(event_id)
        if record is None:
            return None
        return deserialize_event(record.event_type, record.data)

    def read(self, event_type: Optional[str] = None, limit: int = 10_000) -> List[DomainEvent]:
        stmt = select(StoredEvent)
        if event_type is not None:
            stmt = stmt.where(StoredEvent.event_type == event_type)
        stmt = stmt.order_by(StoredEvent.occurred_on, StoredEvent.event_id).limit(limit)
        return [deserialize_event(r.event_type, r.data) for r in self.db.execute(stmt).scalars().all()]

    def replay(self, from_ts: datetime, event_type: Optional[str] = None) -> List[DomainEvent]:
        """Events with occurred_on >= from_ts, oldest first."""
        stmt = select(StoredEvent).where(StoredEvent.occurred_on >= ensure_utc(from_ts))
        if event_type is not None:
            stmt = stmt.where(StoredEvent.event_type == event_type)
        stmt = stmt.order_by(StoredEvent.occurred_on, StoredEvent.event_id)

        records = self.db.execute(stmt).scalars().all()
        logger.info(f"Replaying {len(records)} events since {from_ts.isoformat()}")
        return [deserialize_event(r.event_type, r.data) for r in records]

#!/usr/bin/env python3
"""
Event Publisher - hands committed events to the bus.

Publishing happens after the producing transaction committed. A failure here
never undoes that commit: the event is already in the producer's event store
and can be re-published with replay_from().
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from core.events import DomainEvent
from database.database import ServiceStore
from database.uow import unit_of_work
from messaging.bus import EventBus

logger = logging.getLogger(__name__)


class EventPublisher:
    def __init__(self, bus: EventBus):
        self.bus = bus

    def publish(self, event: DomainEvent, source: Optional[str] = None) -> bool:
        """Publish one event. Returns False if the bus rejected it."""
        try:
            services = self.bus.publish(event)
        except Exception as e:
            logger.error(
                f"Failed to publish {type(event).__name__} {event.event_id} from {source}: {e}. "
                f"Event remains in the {source} event store for replay."
            )
            return False

        logger.debug(f"Published {type(event).__name__} {event.event_id} from {source} to {services}")
        return True

    def publish_all(self, events: Iterable[DomainEvent], source: Optional[str] = None) -> int:
        """Publish events in order. Returns how many were accepted by the bus."""
        published = 0
        for event in events:
            if self.publish(event, source=source):
                published += 1
        return published

    def replay_from(
        self,
        store: ServiceStore,
        from_ts: datetime,
        event_type: Optional[str] = None
    ) -> int:
        """
        Re-publish events stored in `store` since `from_ts`.

        Consumers are idempotent, so replaying events they already applied
        leaves their state unchanged.
        """
        with unit_of_work(store) as uow:
            events = uow.events.replay(from_ts, event_type=event_type)

        logger.info(f"Replaying {len(events)} events from {store.name} since {from_ts.isoformat()}")
        return self.publish_all(events, source=store.name)

import contextlib
import logging
import threading
from typing import List, Optional

from sqlalchemy.orm import Session

from core.events import DomainEvent
from core.exceptions import OperationCancelledError
from database.database import ServiceStore
from database.repositories import (
    EventStoreRepository,
    AccountRepository,
    MatchRepository,
    CallRepository,
    ChatThreadRepository,
    AppointmentRepository,
    ClosedMatchRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Repositories bound to one Session of one service store.

    Domain events passed to record() are written to the store's event log in
    the same transaction as the state change that produced them.
    """

    def __init__(self, session: Session, service: str, cancel_event: Optional[threading.Event] = None):
        self.session = session
        self.service = service
        self.cancel_event = cancel_event

        self.events = EventStoreRepository(session)
        self.accounts = AccountRepository(session)
        self.matches = MatchRepository(session)
        self.calls = CallRepository(session)
        self.chats = ChatThreadRepository(session)
        self.appointments = AppointmentRepository(session)
        self.closed_matches = ClosedMatchRepository(session)

        self._recorded: List[DomainEvent] = []

    def record(self, event: DomainEvent) -> None:
        if self.events.append(event):
            self._recorded.append(event)

    @property
    def recorded_events(self) -> List[DomainEvent]:
        return list(self._recorded)

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError(f"Operation on {self.service} store cancelled")


@contextlib.contextmanager
def unit_of_work(
    store: ServiceStore,
    publisher=None,
    cancel_event: Optional[threading.Event] = None
):
    """Per-unit-of-work transaction scope.

    Yields a UnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. Events recorded during the unit
    of work are handed to `publisher` only after the commit succeeded.

    Usage:
        with unit_of_work(store, publisher) as uow:
            match = uow.matches.get_match(match_id)
            uow.record(accept(match))
        # commit and publish happen automatically on successful exit
    """
    session = store.new_session()
    uow = UnitOfWork(session, store.name, cancel_event=cancel_event)
    try:
        yield uow
        uow.check_cancelled()
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    events = uow.recorded_events
    if publisher is not None and events:
        publisher.publish_all(events, source=store.name)

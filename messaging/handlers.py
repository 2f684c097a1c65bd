#!/usr/bin/env python3
"""
Handler registry and event consumer for one service.

Handlers are registered explicitly per event type at startup. A consumer runs
all of its service's handlers for an event inside a single local transaction;
any exception rolls that transaction back and propagates to the transport,
which owns redelivery.

Handlers must be idempotent: the same event can be delivered more than once.
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Type

from core.events import DomainEvent, event_registry
from core.exceptions import HandlerRegistrationError
from database.database import ServiceStore
from database.uow import UnitOfWork, unit_of_work

logger = logging.getLogger(__name__)

EventHandler = Callable[[UnitOfWork, DomainEvent], None]


class HandlerRegistry:
    """Explicit table of event type name -> handlers for one service."""

    def __init__(self, service: str):
        self.service = service
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def register(self, event_cls: Type[DomainEvent], handler: EventHandler) -> None:
        type_name = event_cls.event_type()
        if type_name not in event_registry:
            raise HandlerRegistrationError(
                f"{self.service}: cannot subscribe to unregistered event type {type_name}"
            )
        if handler in self._handlers[type_name]:
            return
        self._handlers[type_name].append(handler)
        logger.debug(f"{self.service}: {handler.__name__} subscribed to {event_cls.__name__}")

    def on(self, event_cls: Type[DomainEvent]):
        """Decorator form of register()."""
        def decorator(handler: EventHandler) -> EventHandler:
            self.register(event_cls, handler)
            return handler
        return decorator

    def handlers_for(self, type_name: str) -> List[EventHandler]:
        return list(self._handlers.get(type_name, ()))

    def event_types(self) -> List[str]:
        return sorted(name for name, handlers in self._handlers.items() if handlers)

    def require(self, event_classes: Iterable[Type[DomainEvent]]) -> None:
        """Fail fast at startup if any required event type has no handler."""
        missing = [cls.__name__ for cls in event_classes if not self._handlers.get(cls.event_type())]
        if missing:
            raise HandlerRegistrationError(
                f"{self.service}: no handler registered for {', '.join(missing)}"
            )


class EventConsumer:
    """
    Applies delivered events to one service store.

    Args:
        store: The consuming service's store
        registry: That service's handler registrations
        publisher: Receives events recorded by handlers (optional)
    """

    def __init__(self, store: ServiceStore, registry: HandlerRegistry, publisher=None):
        self.store = store
        self.registry = registry
        self.publisher = publisher

    @property
    def service(self) -> str:
        return self.registry.service

    def subscribes_to(self, type_name: str) -> bool:
        return bool(self.registry.handlers_for(type_name))

    def handle(self, event: DomainEvent, cancel_event: Optional[threading.Event] = None) -> int:
        """
        Run every handler for the event in one local transaction.

        If cancel_event is set before the commit, nothing is applied.

        Returns the number of handlers run (0 if the service does not
        subscribe to this event type).
        """
        handlers = self.registry.handlers_for(event.event_type())
        if not handlers:
            return 0

        logger.info(f"{self.service}: handling {type(event).__name__} {event.event_id}")
        try:
            with unit_of_work(self.store, self.publisher, cancel_event) as uow:
                for handler in handlers:
                    handler(uow, event)
        except Exception as e:
            logger.error(
                f"{self.service}: failed to handle {type(event).__name__} {event.event_id}: {e}",
                exc_info=True
            )
            raise

        return len(handlers)

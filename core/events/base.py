#!/usr/bin/env python3
"""
Domain Event base and the event type registry.

Events are frozen pydantic models. Each concrete event class is registered
under a stable, fully-qualified type name so a generic store/replay path can
turn (type name, JSON payload) back into the right class.
"""

import json
import uuid
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.exceptions import UnknownEventTypeError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DomainEvent(BaseModel):
    """
    Immutable record of something that happened to an aggregate.

    event_id and occurred_on are fixed at construction. event_version is the
    payload schema version; a type bumps its default when it changes fields.
    Unknown fields are rejected when an event is built in code and dropped
    when a stored or delivered payload is deserialized, so a consumer can read
    events from a producer that has added fields.
    """
    model_config = ConfigDict(frozen=True, extra='forbid')

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_version: int = 1
    occurred_on: datetime = Field(default_factory=utcnow)

    @field_validator('occurred_on')
    @classmethod
    def _occurred_on_is_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @classmethod
    def event_type(cls) -> str:
        """Stable fully-qualified type name recorded alongside the payload."""
        return f"{cls.__module__}.{cls.__qualname__}"

    @property
    def partition_key(self) -> str:
        """Aggregate id used to keep one aggregate's events in order."""
        return self.event_id

    def to_json(self) -> str:
        return self.model_dump_json()


E = TypeVar('E', bound=Type[DomainEvent])


class EventTypeRegistry:
    """Explicit table of type name -> event class, filled at import time."""

    def __init__(self):
        self._types: Dict[str, Type[DomainEvent]] = {}

    def register(self, event_cls: E) -> E:
        """Class decorator registering an event type under its stable name."""
        if not (isinstance(event_cls, type) and issubclass(event_cls, DomainEvent)):
            raise TypeError(f"{event_cls!r} is not a DomainEvent subclass")

        name = event_cls.event_type()
        existing = self._types.get(name)
        if existing is not None and existing is not event_cls:
            raise ValueError(f"Event type name already registered: {name}")

        self._types[name] = event_cls
        return event_cls

    def resolve(self, type_name: str) -> Type[DomainEvent]:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownEventTypeError(f"Unknown event type: {type_name}") from None

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._types

    def names(self) -> Iterable[str]:
        return sorted(self._types)


event_registry = EventTypeRegistry()


def serialize_event(event: DomainEvent) -> str:
    """JSON payload for an event (the type name is stored separately)."""
    return event.to_json()


def deserialize_event(type_name: str, data: str, registry: EventTypeRegistry = event_registry) -> DomainEvent:
    """
    Rebuild the concrete event from its type name and JSON payload.

    Fields this version of the event type does not know are dropped.
    """
    event_cls = registry.resolve(type_name)
    payload = json.loads(data)

    unknown = set(payload) - set(event_cls.model_fields)
    if unknown:
        logger.debug(f"Ignoring unknown fields {sorted(unknown)} in {type_name} payload")
        payload = {k: v for k, v in payload.items() if k not in unknown}

    return event_cls.model_validate(payload)

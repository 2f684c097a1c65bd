"""
Domain Events Module

Immutable events, the type registry used to (de)serialize them, and the
concrete events exchanged between services.

Usage:
    from core.events import UserDeletedEvent, serialize_event, deserialize_event

    event = UserDeletedEvent(user_id="u1", reason="account closed")
    data = serialize_event(event)
    same = deserialize_event(event.event_type(), data)
"""

from core.events.base import (
    DomainEvent,
    EventTypeRegistry,
    event_registry,
    serialize_event,
    deserialize_event,
    utcnow,
    ensure_utc,
)

from core.events.types import (
    UserDeletedEvent,
    SkillDeletedEvent,
    MatchRequestCreatedDomainEvent,
    MatchLifecycleEvent,
    MatchAcceptedDomainEvent,
    MatchRejectedDomainEvent,
    MatchExpiredDomainEvent,
    MatchCompletedDomainEvent,
    MatchDissolvedDomainEvent,
)

__all__ = [
    # Base
    'DomainEvent',
    'EventTypeRegistry',
    'event_registry',
    'serialize_event',
    'deserialize_event',
    'utcnow',
    'ensure_utc',
    # Events
    'UserDeletedEvent',
    'SkillDeletedEvent',
    'MatchRequestCreatedDomainEvent',
    'MatchLifecycleEvent',
    'MatchAcceptedDomainEvent',
    'MatchRejectedDomainEvent',
    'MatchExpiredDomainEvent',
    'MatchCompletedDomainEvent',
    'MatchDissolvedDomainEvent',
]

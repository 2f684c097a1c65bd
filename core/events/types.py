#!/usr/bin/env python3
"""
Concrete domain events exchanged between services.

Deletion events drive cascades; match lifecycle events are emitted once per
state transition of a Match.
"""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import Field

from core.events.base import DomainEvent, event_registry, utcnow


@event_registry.register
class UserDeletedEvent(DomainEvent):
    user_id: str
    email: Optional[str] = None
    deleted_by: Optional[str] = None
    reason: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.user_id


@event_registry.register
class SkillDeletedEvent(DomainEvent):
    skill_id: str
    user_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.skill_id


@event_registry.register
class MatchRequestCreatedDomainEvent(DomainEvent):
    request_id: str
    requester_id: str
    target_user_id: str
    skill_id: str
    is_skill_exchange: bool = False
    exchange_skill_id: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.request_id


class MatchLifecycleEvent(DomainEvent):
    """Fields shared by every match transition event. Not registered itself."""
    match_id: str
    offering_user_id: str
    requesting_user_id: str

    @property
    def partition_key(self) -> str:
        return self.match_id


@event_registry.register
class MatchAcceptedDomainEvent(MatchLifecycleEvent):
    accepted_at: datetime = Field(default_factory=utcnow)
    # Scheduling context for downstream consumers (chat, appointments)
    skill_id: Optional[str] = None
    thread_id: Optional[str] = None
    agreed_days: Tuple[str, ...] = ()
    agreed_times: Tuple[str, ...] = ()
    session_duration_minutes: int = 60
    total_sessions: int = 1
    is_skill_exchange: bool = False


@event_registry.register
class MatchRejectedDomainEvent(MatchLifecycleEvent):
    rejected_at: datetime = Field(default_factory=utcnow)
    reason: Optional[str] = None


@event_registry.register
class MatchExpiredDomainEvent(MatchLifecycleEvent):
    expired_at: datetime = Field(default_factory=utcnow)


@event_registry.register
class MatchCompletedDomainEvent(MatchLifecycleEvent):
    completed_at: datetime = Field(default_factory=utcnow)
    notes: Optional[str] = None


@event_registry.register
class MatchDissolvedDomainEvent(MatchLifecycleEvent):
    dissolved_at: datetime = Field(default_factory=utcnow)
    reason: Optional[str] = None

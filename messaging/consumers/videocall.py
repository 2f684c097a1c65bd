"""Videocall consumer."""

import logging

from core.events import UserDeletedEvent, MatchDissolvedDomainEvent, MatchCompletedDomainEvent
from database.uow import UnitOfWork
from messaging.handlers import HandlerRegistry

logger = logging.getLogger(__name__)

REQUIRED = (UserDeletedEvent, MatchDissolvedDomainEvent, MatchCompletedDomainEvent)


def on_user_deleted(uow: UnitOfWork, event: UserDeletedEvent) -> None:
    uow.calls.delete_participants_for_user(event.user_id)


def on_match_dissolved(uow: UnitOfWork, event: MatchDissolvedDomainEvent) -> None:
    uow.calls.end_active_sessions_for_match(event.match_id, reason='Match dissolved', ended_at=event.dissolved_at)


def on_match_completed(uow: UnitOfWork, event: MatchCompletedDomainEvent) -> None:
    uow.calls.end_active_sessions_for_match(event.match_id, reason='Match completed', ended_at=event.completed_at)


def register(registry: HandlerRegistry) -> HandlerRegistry:
    registry.register(UserDeletedEvent, on_user_deleted)
    registry.register(MatchDissolvedDomainEvent, on_match_dissolved)
    registry.register(MatchCompletedDomainEvent, on_match_completed)
    return registry

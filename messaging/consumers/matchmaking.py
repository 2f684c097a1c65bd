"""
Matchmaking consumer - drops requests and ends matches that point at deleted
users or skills.
"""

import logging

from core.events import UserDeletedEvent, SkillDeletedEvent
from core.matching import lifecycle
from core.matching.lifecycle import MatchStatus
from database.uow import UnitOfWork
from messaging.handlers import HandlerRegistry

logger = logging.getLogger(__name__)

REQUIRED = (UserDeletedEvent, SkillDeletedEvent)


def on_user_deleted(uow: UnitOfWork, event: UserDeletedEvent) -> None:
    uow.matches.delete_requests_for_user(event.user_id)

    # Transitions are recorded so the other services clean up after the match
    reason = f"User {event.user_id} deleted"
    for match in uow.matches.get_active_matches_for_user(event.user_id):
        if match.status == MatchStatus.PENDING.value:
            uow.record(lifecycle.expire(match, now=event.occurred_on))
        else:
            uow.record(lifecycle.dissolve(match, reason=reason, now=event.occurred_on))


def on_skill_deleted(uow: UnitOfWork, event: SkillDeletedEvent) -> None:
    uow.matches.delete_pending_requests_for_skill(event.skill_id)


def register(registry: HandlerRegistry) -> HandlerRegistry:
    registry.register(UserDeletedEvent, on_user_deleted)
    registry.register(SkillDeletedEvent, on_skill_deleted)
    return registry

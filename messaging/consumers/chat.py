"""
Chat consumer - one thread per accepted match.
"""

import logging

from core.events import UserDeletedEvent, MatchAcceptedDomainEvent, MatchDissolvedDomainEvent
from core.matching.service import generate_thread_id
from database.models import ChatThread
from database.uow import UnitOfWork
from messaging.handlers import HandlerRegistry

logger = logging.getLogger(__name__)

REQUIRED = (MatchAcceptedDomainEvent, MatchDissolvedDomainEvent, UserDeletedEvent)


def on_match_accepted(uow: UnitOfWork, event: MatchAcceptedDomainEvent) -> None:
    if uow.closed_matches.is_closed(event.match_id):
        logger.info(f"Match {event.match_id} already dissolved, not opening a chat thread")
        return

    if uow.chats.get_by_match_id(event.match_id) is not None:
        logger.debug(f"Chat thread for match {event.match_id} already exists")
        return

    thread_id = event.thread_id or generate_thread_id(
        event.offering_user_id, event.requesting_user_id, event.skill_id or event.match_id
    )
    if uow.chats.get_by_thread_id(thread_id) is not None:
        # Same users and skill matched again; the conversation continues
        logger.info(f"Chat thread {thread_id} already exists, not linking match {event.match_id}")
        return

    uow.chats.add_thread(ChatThread(
        thread_id=thread_id,
        match_id=event.match_id,
        participant1_id=event.offering_user_id,
        participant2_id=event.requesting_user_id,
        skill_id=event.skill_id,
    ))
    logger.info(f"Created chat thread {thread_id} for match {event.match_id}")


def on_match_dissolved(uow: UnitOfWork, event: MatchDissolvedDomainEvent) -> None:
    uow.closed_matches.mark_closed(event.match_id, status='Dissolved', closed_at=event.dissolved_at)
    uow.chats.lock_thread_for_match(event.match_id, reason=event.reason or 'Match dissolved')


def on_user_deleted(uow: UnitOfWork, event: UserDeletedEvent) -> None:
    uow.chats.delete_threads_for_user(event.user_id)


def register(registry: HandlerRegistry) -> HandlerRegistry:
    registry.register(MatchAcceptedDomainEvent, on_match_accepted)
    registry.register(MatchDissolvedDomainEvent, on_match_dissolved)
    registry.register(UserDeletedEvent, on_user_deleted)
    return registry

#!/usr/bin/env python3
"""
Account Service - users and their skills.

Deleting a user or a skill is a local transaction on the accounts store that
also records UserDeletedEvent / SkillDeletedEvent. Dependent rows in the other
services are removed by their own consumers once the event is delivered.
"""

import logging
import threading
from typing import Optional

from core.events import UserDeletedEvent, SkillDeletedEvent, utcnow
from core.exceptions import UserNotFoundException, SkillNotFoundException
from database.database import ServiceStore
from database.models import User, Skill
from database.uow import unit_of_work

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, store: ServiceStore, publisher=None):
        self.store = store
        self.publisher = publisher

    def register_user(self, email: str, display_name: Optional[str] = None, rating: float = 0.0) -> str:
        with unit_of_work(self.store, self.publisher) as uow:
            user = uow.accounts.add_user(User(email=email, display_name=display_name, rating=rating))
            user_id = user.id
        logger.info(f"Registered user {user_id}")
        return user_id

    def add_skill(self, user_id: str, name: str, is_offered: bool = True) -> str:
        with unit_of_work(self.store, self.publisher) as uow:
            if uow.accounts.get_user(user_id) is None:
                raise UserNotFoundException(f"User {user_id} not found")
            skill = uow.accounts.add_skill(Skill(user_id=user_id, name=name, is_offered=is_offered))
            skill_id = skill.id
        return skill_id

    def delete_user(
        self,
        user_id: str,
        deleted_by: Optional[str] = None,
        reason: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> UserDeletedEvent:
        """Delete a user and their skills, emitting UserDeletedEvent."""
        with unit_of_work(self.store, self.publisher, cancel_event) as uow:
            user = uow.accounts.get_user(user_id)
            if user is None:
                raise UserNotFoundException(f"User {user_id} not found")

            for skill in uow.accounts.get_skills_for_user(user_id):
                uow.accounts.delete_skill(skill)

            event = UserDeletedEvent(
                occurred_on=utcnow(),
                user_id=user.id,
                email=user.email,
                deleted_by=deleted_by,
                reason=reason,
            )
            uow.accounts.delete_user(user)
            uow.record(event)

        logger.info(f"Deleted user {user_id} (reason: {reason})")
        return event

    def delete_skill(
        self,
        skill_id: str,
        reason: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> SkillDeletedEvent:
        """Delete a skill, emitting SkillDeletedEvent."""
        with unit_of_work(self.store, self.publisher, cancel_event) as uow:
            skill = uow.accounts.get_skill(skill_id)
            if skill is None:
                raise SkillNotFoundException(f"Skill {skill_id} not found")

            event = SkillDeletedEvent(skill_id=skill.id, user_id=skill.user_id, reason=reason)
            uow.accounts.delete_skill(skill)
            uow.record(event)

        logger.info(f"Deleted skill {skill_id}")
        return event

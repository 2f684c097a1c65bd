"""
Appointment consumer - schedules sessions for accepted matches and cancels
them when the match, a participant or the skill goes away.

Scheduling:
    First session: the next preferred weekday within the week after
    acceptance (3 days after acceptance if none is given), at the first
    preferred time (18:00 if none parses).
    Follow-up sessions: weekly after the first one.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Optional, Sequence

from core.events import (
    UserDeletedEvent,
    SkillDeletedEvent,
    MatchAcceptedDomainEvent,
    MatchDissolvedDomainEvent,
    ensure_utc,
)
from database.models import Appointment
from database.uow import UnitOfWork
from messaging.handlers import HandlerRegistry

logger = logging.getLogger(__name__)

REQUIRED = (MatchAcceptedDomainEvent, MatchDissolvedDomainEvent, UserDeletedEvent, SkillDeletedEvent)

DEFAULT_LEAD_DAYS = 3
DEFAULT_TIME = time(18, 0)
SYSTEM_USER = 'System'


def parse_time(value: str) -> Optional[time]:
    """Parse 'HH:MM' or 'HH:MM:SS'. Returns None for anything else."""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except (ValueError, AttributeError):
            continue
    return None


def first_session_date(
    accepted_at: datetime,
    preferred_days: Sequence[str] = (),
    preferred_times: Sequence[str] = ()
) -> datetime:
    """Date and time of the first session of a match accepted at `accepted_at`."""
    today = ensure_utc(accepted_at).replace(hour=0, minute=0, second=0, microsecond=0)
    target_date = today + timedelta(days=DEFAULT_LEAD_DAYS)

    wanted = {d.strip().casefold() for d in preferred_days if d and d.strip()}
    if wanted:
        for offset in range(1, 8):
            candidate = today + timedelta(days=offset)
            if candidate.strftime("%A").casefold() in wanted:
                target_date = candidate
                break

    target_time = DEFAULT_TIME
    if preferred_times:
        target_time = parse_time(preferred_times[0]) or DEFAULT_TIME

    return target_date.replace(hour=target_time.hour, minute=target_time.minute, second=target_time.second)


def on_match_accepted(uow: UnitOfWork, event: MatchAcceptedDomainEvent) -> None:
    if uow.closed_matches.is_closed(event.match_id):
        logger.info(f"Match {event.match_id} already dissolved, not scheduling appointments")
        return

    if uow.appointments.has_appointments_for_match(event.match_id):
        logger.debug(f"Appointments for match {event.match_id} already exist")
        return

    first = first_session_date(event.accepted_at, event.agreed_days, event.agreed_times)
    total = max(1, event.total_sessions)
    title = f"Skill-Exchange: {event.skill_id}"

    for session_number in range(1, total + 1):
        uow.appointments.add(Appointment(
            match_id=event.match_id,
            organizer_user_id=event.requesting_user_id,
            participant_user_id=event.offering_user_id,
            skill_id=event.skill_id,
            title=title if session_number == 1 else f"{title} - Session {session_number}",
            scheduled_date=first + timedelta(days=7 * (session_number - 1)),
            duration_minutes=event.session_duration_minutes,
            meeting_type='Exchange' if event.is_skill_exchange else 'Learning',
            is_skill_exchange=event.is_skill_exchange,
            session_number=session_number,
            total_sessions=total,
            created_by=SYSTEM_USER,
        ))

    logger.info(f"Scheduled {total} appointments for match {event.match_id}, first on {first.isoformat()}")


def on_match_dissolved(uow: UnitOfWork, event: MatchDissolvedDomainEvent) -> None:
    uow.closed_matches.mark_closed(event.match_id, status='Dissolved', closed_at=event.dissolved_at)
    uow.appointments.cancel_for_match(event.match_id, reason=event.reason or 'Match dissolved')


def on_user_deleted(uow: UnitOfWork, event: UserDeletedEvent) -> None:
    uow.appointments.delete_for_user(event.user_id)


def on_skill_deleted(uow: UnitOfWork, event: SkillDeletedEvent) -> None:
    uow.appointments.cancel_for_skill(event.skill_id, reason='Skill deleted')


def register(registry: HandlerRegistry) -> HandlerRegistry:
    registry.register(MatchAcceptedDomainEvent, on_match_accepted)
    registry.register(MatchDissolvedDomainEvent, on_match_dissolved)
    registry.register(UserDeletedEvent, on_user_deleted)
    registry.register(SkillDeletedEvent, on_skill_deleted)
    return registry

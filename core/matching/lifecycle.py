#!/usr/bin/env python3
"""
Match Lifecycle - status transitions of a Match.

    Pending  -> Accepted | Rejected | Expired
    Accepted -> Completed | Dissolved

Every transition mutates the Match and returns exactly one domain event. The
caller records that event in the same unit of work as the change.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional

from core.events import (
    utcnow,
    MatchAcceptedDomainEvent,
    MatchRejectedDomainEvent,
    MatchExpiredDomainEvent,
    MatchCompletedDomainEvent,
    MatchDissolvedDomainEvent,
)
from core.exceptions import InvalidMatchTransitionError

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    COMPLETED = "Completed"
    DISSOLVED = "Dissolved"


TRANSITIONS: Dict[MatchStatus, FrozenSet[MatchStatus]] = {
    MatchStatus.PENDING: frozenset({MatchStatus.ACCEPTED, MatchStatus.REJECTED, MatchStatus.EXPIRED}),
    MatchStatus.ACCEPTED: frozenset({MatchStatus.COMPLETED, MatchStatus.DISSOLVED}),
    MatchStatus.REJECTED: frozenset(),
    MatchStatus.EXPIRED: frozenset(),
    MatchStatus.COMPLETED: frozenset(),
    MatchStatus.DISSOLVED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        return MatchStatus(target) in TRANSITIONS[MatchStatus(current)]
    except ValueError:
        return False


def is_terminal(status: str) -> bool:
    return not TRANSITIONS.get(MatchStatus(status))


def _transition(match, target: MatchStatus, now: datetime) -> None:
    if not can_transition(match.status, target.value):
        raise InvalidMatchTransitionError(match.id, match.status, target.value)

    logger.info(f"Match {match.id}: {match.status} -> {target.value}")
    match.status = target.value
    match.updated_at = now


def _ids(match) -> dict:
    return {
        'match_id': match.id,
        'offering_user_id': match.offering_user_id,
        'requesting_user_id': match.requesting_user_id,
    }


def accept(match, now: Optional[datetime] = None) -> MatchAcceptedDomainEvent:
    now = now or utcnow()
    _transition(match, MatchStatus.ACCEPTED, now)
    match.accepted_at = now

    return MatchAcceptedDomainEvent(
        occurred_on=now,
        accepted_at=now,
        skill_id=match.offered_skill_id,
        thread_id=match.thread_id,
        agreed_days=tuple(match.agreed_days or ()),
        agreed_times=tuple(match.agreed_times or ()),
        session_duration_minutes=match.session_duration_minutes or 60,
        total_sessions=match.total_sessions_planned or 1,
        is_skill_exchange=bool(match.is_skill_exchange),
        **_ids(match)
    )


def reject(match, reason: Optional[str] = None, now: Optional[datetime] = None) -> MatchRejectedDomainEvent:
    now = now or utcnow()
    _transition(match, MatchStatus.REJECTED, now)
    match.rejected_at = now
    match.rejection_reason = reason

    return MatchRejectedDomainEvent(occurred_on=now, rejected_at=now, reason=reason, **_ids(match))


def expire(match, now: Optional[datetime] = None) -> MatchExpiredDomainEvent:
    now = now or utcnow()
    _transition(match, MatchStatus.EXPIRED, now)
    match.expired_at = now

    return MatchExpiredDomainEvent(occurred_on=now, expired_at=now, **_ids(match))


def complete(match, notes: Optional[str] = None, now: Optional[datetime] = None) -> MatchCompletedDomainEvent:
    now = now or utcnow()
    _transition(match, MatchStatus.COMPLETED, now)
    match.completed_at = now
    match.completion_notes = notes

    return MatchCompletedDomainEvent(occurred_on=now, completed_at=now, notes=notes, **_ids(match))


def dissolve(match, reason: Optional[str] = None, now: Optional[datetime] = None) -> MatchDissolvedDomainEvent:
    now = now or utcnow()
    _transition(match, MatchStatus.DISSOLVED, now)
    match.dissolved_at = now
    match.dissolution_reason = reason

    return MatchDissolvedDomainEvent(occurred_on=now, dissolved_at=now, reason=reason, **_ids(match))

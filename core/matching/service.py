#!/usr/bin/env python3
"""
Match Service - match requests, match creation and lifecycle operations.

Each operation runs in one unit of work on the matchmaking store. The domain
event a transition produces is written to the store's event log in that same
transaction and published once the transaction has committed.
"""

import hashlib
import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from core.config_loader import MatchingConfig, ScoringWeights
from core.events import DomainEvent, MatchRequestCreatedDomainEvent, utcnow
from core.exceptions import (
    InvalidMatchRequestError,
    MatchNotFoundException,
    MatchRequestNotFoundException,
)
from core.matching import lifecycle
from core.scorer import MatchCandidatePair, RankedCandidate, calculate_compatibility_breakdown, rank_candidates
from database.database import ServiceStore
from database.models import Match, MatchRequest
from database.uow import unit_of_work

logger = logging.getLogger(__name__)


def generate_thread_id(user_a: str, user_b: str, skill_id: str) -> str:
    """
    Stable conversation id for two users and a skill.

    The ids are sorted first so either user initiating yields the same thread.
    """
    first, second = sorted([user_a, user_b])
    digest = hashlib.sha256(f"{first}:{second}:{skill_id}".encode("utf-8")).digest()
    return str(uuid.UUID(bytes=digest[:16]))


class MatchService:
    """
    Matchmaking operations.

    Args:
        store: The matchmaking service store
        publisher: Receives committed events (optional)
        config: Ranking and request expiry policy
        weights: Compatibility score weights
    """

    def __init__(
        self,
        store: ServiceStore,
        publisher=None,
        config: Optional[MatchingConfig] = None,
        weights: Optional[ScoringWeights] = None
    ):
        self.store = store
        self.publisher = publisher
        self.config = config or MatchingConfig()
        self.weights = weights or ScoringWeights()

    # ---- Requests ----

    def create_match_request(
        self,
        requester_id: str,
        target_user_id: str,
        skill_id: str,
        message: Optional[str] = None,
        is_skill_exchange: bool = False,
        exchange_skill_id: Optional[str] = None,
        preferred_days: Sequence[str] = (),
        preferred_times: Sequence[str] = (),
        session_duration_minutes: Optional[int] = None,
        total_sessions: int = 1,
        cancel_event: Optional[threading.Event] = None
    ) -> str:
        """Create a pending match request and return its id."""
        if not requester_id or not target_user_id or not skill_id:
            raise InvalidMatchRequestError("Missing required fields for match request")

        if requester_id == target_user_id:
            raise InvalidMatchRequestError("You cannot create a match request for your own skill")

        now = utcnow()
        with unit_of_work(self.store, self.publisher, cancel_event) as uow:
            if uow.matches.has_pending_request(requester_id, target_user_id, skill_id):
                logger.warning(f"User {requester_id} already has a pending request for skill {skill_id}")
                raise InvalidMatchRequestError("You already have a pending request for this skill")

            request = uow.matches.add_request(MatchRequest(
                requester_id=requester_id,
                target_user_id=target_user_id,
                skill_id=skill_id,
                is_skill_exchange=is_skill_exchange,
                exchange_skill_id=exchange_skill_id,
                status='Pending',
                message=message,
                thread_id=generate_thread_id(requester_id, target_user_id, skill_id),
                preferred_days=list(preferred_days or ()),
                preferred_times=list(preferred_times or ()),
                session_duration_minutes=session_duration_minutes,
                total_sessions=total_sessions,
                expires_at=now + timedelta(days=self.config.request_expiry_days),
                created_at=now,
            ))

            uow.record(MatchRequestCreatedDomainEvent(
                occurred_on=now,
                request_id=request.id,
                requester_id=requester_id,
                target_user_id=target_user_id,
                skill_id=skill_id,
                is_skill_exchange=is_skill_exchange,
                exchange_skill_id=exchange_skill_id,
            ))
            request_id = request.id

        logger.info(f"Created match request {request_id} from {requester_id} to {target_user_id}")
        return request_id

    # ---- Scoring ----

    def rank(
        self,
        candidates: Iterable[Tuple[str, MatchCandidatePair]],
        min_score: Optional[float] = None,
        top_k: Optional[int] = None
    ) -> List[RankedCandidate]:
        """Rank candidate pairs using the configured result policy."""
        return rank_candidates(
            candidates,
            min_score=self.config.min_compatibility_score if min_score is None else min_score,
            top_k=self.config.top_k if top_k is None else top_k,
            weights=self.weights,
        )

    def create_match_from_request(
        self,
        request_id: str,
        pair: MatchCandidatePair,
        agreed_days: Optional[Sequence[str]] = None,
        agreed_times: Optional[Sequence[str]] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> str:
        """Score the pairing behind a request and store it as a pending Match."""
        breakdown = calculate_compatibility_breakdown(pair, self.weights)

        with unit_of_work(self.store, self.publisher, cancel_event) as uow:
            request = uow.matches.get_request(request_id)
            if request is None:
                raise MatchRequestNotFoundException(f"Match request {request_id} not found")
            if request.status != 'Pending':
                raise InvalidMatchRequestError(
                    f"Match request {request_id} is {request.status}, only pending requests can be matched"
                )

            match = uow.matches.add_match(Match(
                offering_user_id=request.target_user_id,
                requesting_user_id=request.requester_id,
                offered_skill_id=request.skill_id,
                requested_skill_id=request.exchange_skill_id,
                status=lifecycle.MatchStatus.PENDING.value,
                compatibility_score=breakdown.total,
                score_components=breakdown.as_dict(),
                is_skill_exchange=request.is_skill_exchange,
                exchange_skill_id=request.exchange_skill_id,
                agreed_days=list(agreed_days if agreed_days is not None else request.preferred_days or []),
                agreed_times=list(agreed_times if agreed_times is not None else request.preferred_times or []),
                session_duration_minutes=request.session_duration_minutes or self.config.default_session_duration_minutes,
                total_sessions_planned=request.total_sessions or 1,
                original_request_id=request.id,
                thread_id=request.thread_id,
            ))
            request.status = 'Matched'
            match_id = match.id

        logger.info(f"Created match {match_id} (score={breakdown.total:.2f}) from request {request_id}")
        return match_id

    # ---- Lifecycle ----

    def _apply(self, match_id: str, transition, cancel_event: Optional[threading.Event] = None, **kwargs) -> DomainEvent:
        with unit_of_work(self.store, self.publisher, cancel_event) as uow:
            match = uow.matches.get_match(match_id)
            if match is None:
                raise MatchNotFoundException(f"Match {match_id} not found")
            event = transition(match, **kwargs)
            uow.record(event)
        return event

    def accept_match(self, match_id: str, cancel_event: Optional[threading.Event] = None):
        return self._apply(match_id, lifecycle.accept, cancel_event)

    def reject_match(self, match_id: str, reason: Optional[str] = None, cancel_event: Optional[threading.Event] = None):
        return self._apply(match_id, lifecycle.reject, cancel_event, reason=reason)

    def complete_match(self, match_id: str, notes: Optional[str] = None, cancel_event: Optional[threading.Event] = None):
        return self._apply(match_id, lifecycle.complete, cancel_event, notes=notes)

    def dissolve_match(self, match_id: str, reason: Optional[str] = None, cancel_event: Optional[threading.Event] = None):
        return self._apply(match_id, lifecycle.dissolve, cancel_event, reason=reason)

    def expire_pending_matches(self, now: Optional[datetime] = None) -> int:
        """Expire pending matches older than the request expiry window."""
        now = now or utcnow()
        cutoff = now - timedelta(days=self.config.request_expiry_days)

        with unit_of_work(self.store, self.publisher) as uow:
            matches = uow.matches.get_pending_matches_created_before(cutoff)
            for match in matches:
                uow.record(lifecycle.expire(match, now=now))
            count = len(matches)

        if count > 0:
            logger.info(f"Expired {count} pending matches created before {cutoff.isoformat()}")
        return count

    def get_match_status(self, match_id: str) -> str:
        with self.store.session_scope() as session:
            match = session.get(Match, match_id)
            if match is None:
                raise MatchNotFoundException(f"Match {match_id} not found")
            return match.status

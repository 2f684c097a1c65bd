#!/usr/bin/env python3
"""
Compatibility Scoring - Fixed weighted sum over four factors.

    score = skill_match     (0.40 if the skills match)
          + rating          (avg rating / scale * 0.20)
          + schedule        (mean Jaccard of days and times * 0.30)
          + exchange_bonus  (0.10 for a matching skill exchange)

The result is clamped to [0.0, 1.0]. Callers rank and filter matches by this
number, so the weights and the neutral-overlap rule must stay stable.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from core.config_loader import ScoringWeights
from core.scorer.models import MatchCandidatePair, CompatibilityBreakdown, RankedCandidate
from core.scorer.schedule import schedule_overlap

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = ScoringWeights()


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if value != value:  # NaN
        return low
    return max(low, min(high, value))


def _rating_component(requester_rating: float, target_rating: float, weights: ScoringWeights) -> float:
    if weights.rating_scale <= 0:
        return 0.0
    average = ((requester_rating or 0.0) + (target_rating or 0.0)) / 2.0
    return average / weights.rating_scale * weights.rating


def calculate_compatibility_breakdown(
    pair: MatchCandidatePair,
    weights: Optional[ScoringWeights] = None
) -> CompatibilityBreakdown:
    """Score a candidate pair and return each weighted contribution."""
    weights = weights or DEFAULT_WEIGHTS

    skill_component = weights.skill_match if pair.skills_match else 0.0
    rating_component = _rating_component(pair.requester_rating, pair.target_rating, weights)

    day_overlap = schedule_overlap(
        pair.requester_preferred_days,
        pair.target_preferred_days,
        neutral=weights.neutral_overlap
    )
    time_overlap = schedule_overlap(
        pair.requester_preferred_times,
        pair.target_preferred_times,
        neutral=weights.neutral_overlap
    )
    schedule_component = (day_overlap + time_overlap) / 2.0 * weights.schedule_overlap

    exchange_component = (
        weights.exchange_bonus
        if pair.is_skill_exchange and pair.exchange_skills_match
        else 0.0
    )

    total = _clamp(skill_component + rating_component + schedule_component + exchange_component)

    return CompatibilityBreakdown(
        skill_match=skill_component,
        rating=rating_component,
        schedule_overlap=schedule_component,
        exchange_bonus=exchange_component,
        day_overlap=day_overlap,
        time_overlap=time_overlap,
        total=total,
    )


def calculate_compatibility(
    pair: MatchCandidatePair,
    weights: Optional[ScoringWeights] = None
) -> float:
    """Score a candidate pair. Pure and deterministic; never raises on empty inputs."""
    return calculate_compatibility_breakdown(pair, weights).total


def score(
    skills_match: bool,
    requester_rating: float,
    target_rating: float,
    requester_days: Sequence[str],
    target_days: Sequence[str],
    requester_times: Sequence[str],
    target_times: Sequence[str],
    is_exchange: bool,
    exchange_match: bool = False,
    weights: Optional[ScoringWeights] = None
) -> float:
    """Flat-argument form of calculate_compatibility."""
    pair = MatchCandidatePair(
        requester_rating=requester_rating,
        target_rating=target_rating,
        requester_preferred_days=requester_days,
        target_preferred_days=target_days,
        requester_preferred_times=requester_times,
        target_preferred_times=target_times,
        skills_match=skills_match,
        is_skill_exchange=is_exchange,
        exchange_skills_match=exchange_match,
    )
    return calculate_compatibility(pair, weights)


def rank_candidates(
    candidates: Iterable[Tuple[str, MatchCandidatePair]],
    min_score: float = 0.0,
    top_k: Optional[int] = None,
    weights: Optional[ScoringWeights] = None
) -> List[RankedCandidate]:
    """
    Score (key, pair) candidates and return them best first.

    Ties keep their input order. Candidates below min_score are dropped and
    the result is truncated to top_k when given.
    """
    ranked = []
    for key, pair in candidates:
        breakdown = calculate_compatibility_breakdown(pair, weights)
        if breakdown.total < min_score:
            continue
        ranked.append(RankedCandidate(key=key, score=breakdown.total, breakdown=breakdown))

    ranked.sort(key=lambda c: c.score, reverse=True)

    if top_k is not None:
        ranked = ranked[:top_k]

    logger.debug(f"Ranked {len(ranked)} candidates (min_score={min_score}, top_k={top_k})")
    return ranked

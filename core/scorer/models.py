#!/usr/bin/env python3
"""
Scoring Models - Data structures for compatibility scoring.
"""

from typing import Iterable, Tuple
from dataclasses import dataclass, field


def _as_tuple(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(values or ())


@dataclass(frozen=True)
class MatchCandidatePair:
    """Attributes of a requester/target pairing, built fresh for each scoring call."""
    requester_rating: float = 0.0
    target_rating: float = 0.0
    requester_preferred_days: Tuple[str, ...] = field(default_factory=tuple)
    target_preferred_days: Tuple[str, ...] = field(default_factory=tuple)
    requester_preferred_times: Tuple[str, ...] = field(default_factory=tuple)
    target_preferred_times: Tuple[str, ...] = field(default_factory=tuple)
    skills_match: bool = False
    is_skill_exchange: bool = False
    exchange_skills_match: bool = False

    def __post_init__(self):
        # Accept lists/sets/None from callers; store immutable tuples
        for name in (
            'requester_preferred_days',
            'target_preferred_days',
            'requester_preferred_times',
            'target_preferred_times',
        ):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))


@dataclass(frozen=True)
class CompatibilityBreakdown:
    """Weighted contributions of each factor plus the clamped total."""
    skill_match: float = 0.0
    rating: float = 0.0
    schedule_overlap: float = 0.0
    exchange_bonus: float = 0.0
    day_overlap: float = 0.0
    time_overlap: float = 0.0
    total: float = 0.0

    def as_dict(self) -> dict:
        return {
            'skill_match': self.skill_match,
            'rating': self.rating,
            'schedule_overlap': self.schedule_overlap,
            'exchange_bonus': self.exchange_bonus,
            'day_overlap': self.day_overlap,
            'time_overlap': self.time_overlap,
            'total': self.total,
        }


@dataclass
class RankedCandidate:
    """A scored candidate, as returned by rank_candidates."""
    key: str
    score: float
    breakdown: CompatibilityBreakdown

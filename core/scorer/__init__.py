#!/usr/bin/env python3
"""
Scoring Module - Match compatibility scoring.

Public API:
- score / calculate_compatibility: 0.0-1.0 compatibility of a candidate pair
- calculate_compatibility_breakdown: the same score itemised per factor
- rank_candidates: score, filter and order a batch of candidates

- models.py: Data structures (MatchCandidatePair, CompatibilityBreakdown)
- schedule.py: Jaccard overlap of preferred days/times
- compatibility.py: Weighted-sum formula and ranking
"""

from core.scorer.models import MatchCandidatePair, CompatibilityBreakdown, RankedCandidate
from core.scorer.schedule import schedule_overlap
from core.scorer.compatibility import (
    score,
    calculate_compatibility,
    calculate_compatibility_breakdown,
    rank_candidates,
)

__all__ = [
    'MatchCandidatePair',
    'CompatibilityBreakdown',
    'RankedCandidate',
    'schedule_overlap',
    'score',
    'calculate_compatibility',
    'calculate_compatibility_breakdown',
    'rank_candidates',
]

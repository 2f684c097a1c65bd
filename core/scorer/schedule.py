#!/usr/bin/env python3
"""
Schedule Overlap - Jaccard similarity of preferred days/times.
"""

from typing import Iterable, Set


def _normalize(values: Iterable[str]) -> Set[str]:
    return {v.strip().casefold() for v in values if v and v.strip()}


def schedule_overlap(
    first: Iterable[str],
    second: Iterable[str],
    neutral: float = 0.5
) -> float:
    """
    Jaccard similarity of two preference lists, compared case-insensitively.

    If either side is empty the overlap is `neutral`, so candidates who did not
    state a preference are not scored as incompatible.
    """
    a = _normalize(first or ())
    b = _normalize(second or ())

    if not a or not b:
        return neutral

    return len(a & b) / len(a | b)

"""
Matching Module - match lifecycle and matchmaking service.

- lifecycle.py: MatchStatus, allowed transitions, transition functions
- service.py: MatchService (requests, scoring, lifecycle operations)
"""

from core.matching.lifecycle import MatchStatus, TRANSITIONS, can_transition, is_terminal

__all__ = ['MatchStatus', 'TRANSITIONS', 'can_transition', 'is_terminal']

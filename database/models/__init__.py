from .base import Base
from .event_store import StoredEvent
from .accounts import User, Skill
from .match import MatchRequest, Match
from .videocall import CallSession, CallParticipant
from .chat import ChatThread, ChatMessage
from .appointment import Appointment
from .tombstone import ClosedMatch

# Tables owned by each service. Every service store also carries its own
# stored_events table; no table is shared between stores.
SERVICE_MODELS = {
    'accounts': [User, Skill],
    'matchmaking': [MatchRequest, Match],
    'videocall': [CallSession, CallParticipant],
    'chat': [ChatThread, ChatMessage, ClosedMatch],
    'appointment': [Appointment, ClosedMatch],
}


def tables_for_service(service: str):
    models = SERVICE_MODELS[service] + [StoredEvent]
    return [model.__table__ for model in models]


__all__ = [
    'Base',
    'StoredEvent',
    'User',
    'Skill',
    'MatchRequest',
    'Match',
    'CallSession',
    'CallParticipant',
    'ChatThread',
    'ChatMessage',
    'Appointment',
    'ClosedMatch',
    'SERVICE_MODELS',
    'tables_for_service',
]

from database.repositories.base import BaseRepository
from database.repositories.event_store import EventStoreRepository
from database.repositories.accounts import AccountRepository
from database.repositories.match import MatchRepository
from database.repositories.videocall import CallRepository
from database.repositories.chat import ChatThreadRepository
from database.repositories.appointment import AppointmentRepository
from database.repositories.tombstone import ClosedMatchRepository

__all__ = [
    'BaseRepository',
    'EventStoreRepository',
    'AccountRepository',
    'MatchRepository',
    'CallRepository',
    'ChatThreadRepository',
    'AppointmentRepository',
    'ClosedMatchRepository',
]

"""
Messaging - cross-service event delivery.

- handlers.py: HandlerRegistry, EventConsumer
- bus.py: InMemoryEventBus, RedisQueueEventBus
- publisher.py: EventPublisher (publish after commit, replay)
- consumers/: cascade handlers per service
- tasks.py / worker.py: RQ entry points
"""

from messaging.handlers import HandlerRegistry, EventConsumer
from messaging.bus import EventBus, InMemoryEventBus, RedisQueueEventBus, DeadLetter, partition_for
from messaging.publisher import EventPublisher

__all__ = [
    'HandlerRegistry',
    'EventConsumer',
    'EventBus',
    'InMemoryEventBus',
    'RedisQueueEventBus',
    'DeadLetter',
    'partition_for',
    'EventPublisher',
]

#!/usr/bin/env python3
"""
Event buses - deliver committed domain events to consuming services.

- InMemoryEventBus: dispatches synchronously in-process; handler failures are
  kept as dead letters that can be redelivered.
- RedisQueueEventBus: enqueues one RQ job per consuming service. RQ owns the
  retry policy and keeps jobs that exhaust it in its failed job registry.

Events for one aggregate are routed to the same partition queue, so a single
worker per partition takes them in emission order. A retried job is applied
after the jobs behind it, so consumers must not rely on delivery order.
"""

import logging
import time
import zlib
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError
from rq import Queue, Retry
from tenacity import Retrying, stop_after_attempt, wait_fixed, retry_if_exception_type, before_sleep_log

from core.config_loader import MessagingConfig
from core.events import DomainEvent, serialize_event
from messaging.handlers import EventConsumer

logger = logging.getLogger(__name__)

PROCESS_EVENT_TASK = 'messaging.tasks.process_event_task'


def partition_for(key: str, partitions: int) -> int:
    """Stable partition index for an aggregate id."""
    if partitions <= 1:
        return 0
    return zlib.crc32(key.encode('utf-8')) % partitions


class EventBus(ABC):
    """Routes events to the services subscribed to their type."""

    def __init__(self):
        # service -> event type names it consumes
        self._routes: Dict[str, Set[str]] = {}

    def subscribe_service(self, service: str, event_types) -> None:
        self._routes.setdefault(service, set()).update(event_types)

    def subscribe(self, consumer: EventConsumer) -> None:
        self.subscribe_service(consumer.service, consumer.registry.event_types())

    def services_for(self, type_name: str) -> List[str]:
        return sorted(service for service, types in self._routes.items() if type_name in types)

    @abstractmethod
    def publish(self, event: DomainEvent) -> List[str]:
        """
        Deliver an event to every subscribed service.

        Returns the services the event was handed to.
        """
        pass


@dataclass
class DeadLetter:
    """An event a consumer failed to apply."""
    service: str
    event: DomainEvent
    error: str
    timestamp: float = field(default_factory=time.monotonic)


class InMemoryEventBus(EventBus):
    """
    Synchronous in-process bus for tests and single-process deployments.

    A failing consumer does not stop delivery to the others; its failure is
    kept as a dead letter. Only the most recent max_history published events
    are kept in the history.
    """

    def __init__(self, max_history: int = 10_000):
        super().__init__()
        self._consumers: Dict[str, EventConsumer] = {}
        self._history: deque = deque(maxlen=max_history)
        self._dead_letters: List[DeadLetter] = []
        self._error_counts: Dict[str, int] = defaultdict(int)

    def subscribe(self, consumer: EventConsumer) -> None:
        super().subscribe(consumer)
        self._consumers[consumer.service] = consumer

    def publish(self, event: DomainEvent) -> List[str]:
        self._history.append(event)

        delivered = []
        for service in self.services_for(event.event_type()):
            if self._deliver(service, event):
                delivered.append(service)
        return delivered

    def _deliver(self, service: str, event: DomainEvent) -> bool:
        consumer = self._consumers.get(service)
        if consumer is None:
            return False
        try:
            consumer.handle(event)
            return True
        except Exception as exc:
            self._error_counts[service] += 1
            self._dead_letters.append(DeadLetter(service=service, event=event, error=str(exc)))
            logger.exception(
                f"Delivery of {type(event).__name__} {event.event_id} to {service} failed"
            )
            return False

    def redeliver_dead_letters(self) -> int:
        """Retry every dead letter once. Returns how many now succeeded."""
        pending = self._dead_letters
        self._dead_letters = []

        succeeded = 0
        for letter in pending:
            if self._deliver(letter.service, letter.event):
                succeeded += 1
        return succeeded

    @property
    def dead_letters(self) -> List[DeadLetter]:
        return list(self._dead_letters)

    def get_error_counts(self) -> Dict[str, int]:
        return dict(self._error_counts)

    def get_history(self) -> List[DomainEvent]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()


class RedisQueueEventBus(EventBus):
    """
    Publishes events as RQ jobs, one per consuming service.

    Args:
        config: Messaging configuration (redis url, queues, retry policy)
        redis_conn: Existing Redis connection (optional)
    """

    def __init__(self, config: Optional[MessagingConfig] = None, redis_conn: Optional[Redis] = None):
        super().__init__()
        self.config = config or MessagingConfig()
        self._redis = redis_conn
        self._queues: Dict[str, Queue] = {}

    def _get_redis(self) -> Redis:
        """Get Redis connection (lazy init)."""
        if self._redis is None:
            self._redis = Redis.from_url(self.config.redis_url)
        return self._redis

    def queue_name(self, partition: int) -> str:
        return f"{self.config.queue_prefix}-{partition}"

    def queue_names(self) -> List[str]:
        return [self.queue_name(p) for p in range(max(1, self.config.partitions))]

    def queue_for(self, event: DomainEvent) -> Queue:
        name = self.queue_name(partition_for(event.partition_key, self.config.partitions))
        if name not in self._queues:
            self._queues[name] = Queue(name, connection=self._get_redis())
        return self._queues[name]

    def _enqueue(self, queue: Queue, service: str, event: DomainEvent):
        retry_policy = Retry(max=self.config.retry_max, interval=self.config.retry_intervals)

        for attempt in Retrying(
            stop=stop_after_attempt(self.config.enqueue_attempts),
            wait=wait_fixed(self.config.enqueue_wait_seconds),
            retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return queue.enqueue(
                    PROCESS_EVENT_TASK,
                    service,
                    event.event_type(),
                    serialize_event(event),
                    job_id=f"{service}-{event.event_id}",
                    job_timeout=self.config.job_timeout,
                    result_ttl=self.config.result_ttl,
                    retry=retry_policy,
                )

    def publish(self, event: DomainEvent) -> List[str]:
        services = self.services_for(event.event_type())
        if not services:
            return []

        queue = self.queue_for(event)
        for service in services:
            job = self._enqueue(queue, service, event)
            logger.info(f"Queued {type(event).__name__} {event.event_id} for {service} as job {job.id} on {queue.name}")
        return services

    def get_queue_status(self) -> Dict[str, int]:
        redis = self._get_redis()
        return {name: len(Queue(name, connection=redis)) for name in self.queue_names()}

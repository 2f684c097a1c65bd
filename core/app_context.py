from dataclasses import dataclass, field
from typing import Dict, Optional

from core.account_service import AccountService
from core.config_loader import AppConfig, MessagingConfig
from core.matching.service import MatchService
from database.database import ServiceStore, build_stores
from messaging.bus import EventBus, InMemoryEventBus, RedisQueueEventBus
from messaging.consumers import build_consumers
from messaging.handlers import EventConsumer
from messaging.publisher import EventPublisher


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    One store per service, the bus and its publisher, the consumers
    subscribed to that bus, and the services that produce events. DB access
    goes through unit_of_work() on the relevant store.
    """
    config: AppConfig
    stores: Dict[str, ServiceStore]
    bus: EventBus
    publisher: EventPublisher
    consumers: Dict[str, EventConsumer] = field(default_factory=dict)
    accounts: Optional[AccountService] = None
    matches: Optional[MatchService] = None

    @classmethod
    def build(cls, config: AppConfig, stores: Optional[Dict[str, ServiceStore]] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            stores: Existing service stores (built from config if omitted)

        Returns:
            Fully wired AppContext instance
        """
        stores = stores if stores is not None else build_stores(config)

        bus = cls._build_bus(config.messaging)
        publisher = EventPublisher(bus)

        # Consumers publish too: the matchmaking cascade emits lifecycle events
        consumers = build_consumers(stores, publisher)
        for consumer in consumers.values():
            bus.subscribe(consumer)

        return cls(
            config=config,
            stores=stores,
            bus=bus,
            publisher=publisher,
            consumers=consumers,
            accounts=AccountService(stores['accounts'], publisher),
            matches=MatchService(stores['matchmaking'], publisher, config.matching, config.scoring),
        )

    @staticmethod
    def _build_bus(messaging: MessagingConfig) -> EventBus:
        """In-process bus unless the async queue is enabled."""
        if messaging.use_async_queue:
            return RedisQueueEventBus(messaging)
        return InMemoryEventBus()

    def close(self) -> None:
        for store in self.stores.values():
            store.dispose()

"""
Consumers - cascade handlers of each service, wired at startup.

Each module exposes register(registry) and REQUIRED, the event types the
service must handle.
"""

from typing import Dict, Mapping

from database.database import ServiceStore
from messaging.consumers import matchmaking, videocall, chat, appointment
from messaging.handlers import EventConsumer, HandlerRegistry

CONSUMER_MODULES = {
    'matchmaking': matchmaking,
    'videocall': videocall,
    'chat': chat,
    'appointment': appointment,
}


def build_registry(service: str) -> HandlerRegistry:
    module = CONSUMER_MODULES[service]
    registry = module.register(HandlerRegistry(service))
    registry.require(module.REQUIRED)
    return registry


def build_consumer(service: str, store: ServiceStore, publisher=None) -> EventConsumer:
    return EventConsumer(store, build_registry(service), publisher)


def build_consumers(stores: Mapping[str, ServiceStore], publisher=None) -> Dict[str, EventConsumer]:
    """Consumers for every consuming service that has a store."""
    return {
        service: build_consumer(service, stores[service], publisher)
        for service in CONSUMER_MODULES
        if service in stores
    }


__all__ = ['CONSUMER_MODULES', 'build_registry', 'build_consumer', 'build_consumers']

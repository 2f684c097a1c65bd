#!/usr/bin/env python3
"""
RQ task entry point for event delivery.

Workers import this module by name. Exceptions are not caught here: RQ
retries the job according to the Retry policy it was enqueued with and moves
it to the failed job registry once that is exhausted.
"""

import logging
import os
from typing import Optional

from core.config_loader import load_config
from core.events import deserialize_event

logger = logging.getLogger(__name__)

_context = None


def get_context():
    """Worker-wide AppContext, built on first use."""
    global _context
    if _context is None:
        from core.app_context import AppContext

        config = load_config(os.environ.get('SKILLSWAP_CONFIG', 'config.yaml'))
        _context = AppContext.build(config)
        logger.info(f"Worker context ready with consumers: {', '.join(sorted(_context.consumers))}")
    return _context


def set_context(context) -> None:
    """Use an already built AppContext (tests, embedded workers)."""
    global _context
    _context = context


def process_event_task(service: str, event_type: str, data: str, context: Optional[object] = None) -> int:
    """
    Apply one delivered event to one consuming service.

    Returns the number of handlers that ran.
    """
    context = context or get_context()

    consumer = context.consumers.get(service)
    if consumer is None:
        raise ValueError(f"No consumer configured for service {service}")

    event = deserialize_event(event_type, data)
    handled = consumer.handle(event)

    logger.info(f"{service}: applied {event_type} {event.event_id} ({handled} handlers)")
    return handled

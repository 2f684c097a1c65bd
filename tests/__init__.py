#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against SQLite in-memory stores, one per service, so no
external database is needed. Redis and RQ are mocked.

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v
"""

from typing import Dict, Optional

from core.config_loader import AppConfig, SERVICE_NAMES
from database.database import ServiceStore


def make_store(name: str) -> ServiceStore:
    """A fresh in-memory store with the service's schema."""
    store = ServiceStore(name, "sqlite:///:memory:")
    store.create_schema()
    return store


def make_stores(names=SERVICE_NAMES) -> Dict[str, ServiceStore]:
    return {name: make_store(name) for name in names}


def make_context(config: Optional[AppConfig] = None):
    """AppContext over in-memory stores and the in-process bus."""
    from core.app_context import AppContext

    return AppContext.build(config or AppConfig(), stores=make_stores())

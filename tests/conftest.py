"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from tests import make_context, make_store


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that wire several services together"
    )


@pytest.fixture
def matchmaking_store():
    store = make_store("matchmaking")
    yield store
    store.dispose()


@pytest.fixture
def app_context():
    """All services wired over the in-process bus."""
    context = make_context()
    yield context
    context.close()

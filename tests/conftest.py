"""Root pytest configuration for all tests.

Provides the collaborators most navigation tests need: a router, an empty
filter registry, an in-memory option store and a navigation wired to them.
"""

import logging

import pytest

from sitenav.filters import FilterRegistry
from sitenav.navigation import Navigation, Router
from sitenav.settings import MemoryOptionStore

# Keep test output readable; individual tests raise the level with caplog
logging.getLogger("sitenav").setLevel(logging.WARNING)


@pytest.fixture
def router():
    """Router with only the default route."""
    return Router()


@pytest.fixture
def filters():
    """Filter registry without callbacks."""
    return FilterRegistry()


@pytest.fixture
def store():
    """Empty in-memory option store."""
    return MemoryOptionStore()


@pytest.fixture
def nav(router, filters):
    """Empty navigation sharing the router and filter fixtures."""
    return Navigation(router=router, filters=filters)


@pytest.fixture(autouse=True)
def reset_sitenav_logger():
    """Drop handlers the CLI attaches so later tests do not log to closed streams."""
    yield
    app_logger = logging.getLogger("sitenav")
    app_logger.handlers.clear()
    app_logger.setLevel(logging.WARNING)

"""
Shared pytest fixtures and configuration for zderive tests.
"""

import pytest

from tests.utils import Recorder
from zderive import create_simple_store, derive


@pytest.fixture
def recorder():
    """Provide a fresh listener that records its notifications."""
    return Recorder()


@pytest.fixture
def numbers():
    """Two numeric source stores holding 2 and 3."""
    return create_simple_store(2), create_simple_store(3)


@pytest.fixture
def total(numbers):
    """Derived store holding the sum of the `numbers` sources."""
    return derive(
        numbers, lambda deps, prev_deps, prev: deps[0] + deps[1], name="total"
    )

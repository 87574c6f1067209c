"""
Pytest configuration and shared FLV fixtures.
"""

import pytest

from samples import MINIMAL_STREAM


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line("markers", "asyncio: mark test as async")


@pytest.fixture
def minimal_stream() -> bytes:
    return MINIMAL_STREAM

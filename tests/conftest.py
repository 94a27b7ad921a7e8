from unittest.mock import AsyncMock

import pytest

from modelscout.services.model_catalog import reset_catalog_service


class FakeClock:
    """Manually advanced clock for cache TTL tests."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fast_sleep():
    """Awaitable sleep replacement that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture(autouse=True)
def _reset_catalog_service():
    reset_catalog_service()
    yield
    reset_catalog_service()

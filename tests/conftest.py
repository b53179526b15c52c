import pytest

from hn_inbox.handlers.cache_store import CacheStore
from hn_inbox.handlers.cost_tracker import CostLedger
from hn_inbox.handlers.state_store import StateStore


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Memory-only state store."""
    return StateStore(None)


@pytest.fixture
def cache(store, clock):
    return CacheStore(store, clock=clock)


@pytest.fixture
def ledger(store, clock):
    return CostLedger(store, clock=clock)

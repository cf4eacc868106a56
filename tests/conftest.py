"""Shared test fixtures for the clipping test suite."""

import pytest
from clipping.config import Config
from clipping.intelligence.backoff import BackoffExecutor
from clipping.intelligence.cache import TTLCache


class FakeClock:
    """Manually advanced clock for cache tests."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fresh_config(tmp_path, monkeypatch):
    """Create a Config instance with reset singleton state pointed at a temp directory."""
    Config._instance = None
    monkeypatch.setenv("CLIPPING_BASE_DIR", str(tmp_path))
    cfg = Config()
    yield cfg
    Config._instance = None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Small cache driven by a fake clock."""
    return TTLCache(ttl=60, max_size=3, clock=clock)


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def backoff(sleeps):
    """Backoff executor that never actually sleeps and has zero jitter."""
    return BackoffExecutor(max_attempts=3, sleep=sleeps.append, jitter=lambda: 0.0)


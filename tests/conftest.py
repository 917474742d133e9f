"""Shared pytest fixtures for channel sync tests.

Provides backends, config objects and a controllable clock for testing
the sync store without real timing dependencies where possible.
"""

import time

import pytest

from channel_sync.backends import FileKeyValueStore, MemoryKeyValueStore
from channel_sync.config import SyncStoreConfig
from channel_sync.models import SyncRecord
from channel_sync.sync.store import SyncStore


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingBackend(MemoryKeyValueStore):
    """Memory backend that records every write and can be made to fail."""

    def __init__(self):
        super().__init__()
        self.writes = []
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise OSError("Simulated write failure")
        self.writes.append((key, value))
        super().set(key, value)


def wait_for(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Poll until predicate() is truthy or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return CountingBackend()


@pytest.fixture
def file_backend(tmp_path):
    return FileKeyValueStore(tmp_path / "state")


@pytest.fixture
def fast_config():
    """Config with a short debounce so debounce tests finish quickly."""
    return SyncStoreConfig(debounce_seconds=0.05)


@pytest.fixture
def slow_config():
    """Config whose debounce never fires during a test."""
    return SyncStoreConfig(debounce_seconds=60)


@pytest.fixture
def store(slow_config, backend, clock):
    """SyncStore with an in-memory backend and a frozen clock."""
    s = SyncStore(slow_config, backend=backend, clock=clock)
    yield s
    s.close()


@pytest.fixture
def record():
    return SyncRecord(channel_id="north_intrusion")

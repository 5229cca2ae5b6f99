"""Shared pytest fixtures."""

import pytest

from tagstash import (
    KeyBuilder,
    MemoryEntryStore,
    MemoryTagIndex,
    TaggedCache,
)


class FakeClock:
    """Manually advanced wall clock, in seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryEntryStore:
    """Create a fresh MemoryEntryStore driven by the fake clock."""
    return MemoryEntryStore(shards=4, clock=clock)


@pytest.fixture
def index() -> MemoryTagIndex:
    """Create a fresh MemoryTagIndex for each test."""
    return MemoryTagIndex()


@pytest.fixture
def cache(store: MemoryEntryStore, index: MemoryTagIndex) -> TaggedCache:
    """Create a TaggedCache over the fixture store and index."""
    return TaggedCache(store=store, index=index, default_ttl="1d")


@pytest.fixture
def keys() -> KeyBuilder:
    return KeyBuilder()

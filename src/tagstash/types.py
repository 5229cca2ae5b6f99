"""Core types for the tagstash result cache."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    NewType,
    TypeVar,
)

T = TypeVar("T")

# Branded tag type - compile-time enforcement only
if TYPE_CHECKING:
    Tag = NewType("Tag", str)
else:
    Tag = str

# Duration type alias
Duration = str | int | timedelta  # "30s", "10m", "1d", milliseconds or timedelta


@dataclass(frozen=True, slots=True)
class Entry(Generic[T]):
    """A cached value with its lifetime."""

    value: T
    created_at: int  # Unix timestamp ms
    expires_at: int  # Absolute deadline ms

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, slots=True)
class QueryConfig(Generic[T]):
    """Configuration for a cached query.

    ``tag`` is required for list/search/aggregate keys and must be left out
    for single-entity keys that mutators evict directly with ``delete``.
    """

    key: str
    fn: Callable[[], T]
    tag: str | None = None
    ttl: Duration | None = None


@dataclass(frozen=True, slots=True)
class MutationResult(Generic[T]):
    """Result of a write with the cache state it made stale."""

    result: T
    invalidates: list[str] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time counters for a TaggedCache."""

    hits: int
    misses: int
    sets: int
    deletes: int
    invalidations: int
    invalidated_keys: int
    entries: int
    tags: int

    @property
    def hit_ratio(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "invalidations": self.invalidations,
            "invalidated_keys": self.invalidated_keys,
            "entries": self.entries,
            "tags": self.tags,
            "hit_ratio": self.hit_ratio,
        }


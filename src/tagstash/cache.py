"""Tagged result cache.

Read path:

    plans = cache.fetch(keys.search("plans", search=q, page=p), load, tag=PLANS)

Write path, after the backing store accepted the change:

    cache.delete(keys.entity("plan", plan_id))
    cache.invalidate_tag(PLANS)
"""

import logging
import threading
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from tagstash.duration import parse_duration
from tagstash.keys import LIST_TTL
from tagstash.stores.base import EntryStore, TagIndex
from tagstash.stores.memory import MemoryEntryStore, MemoryTagIndex
from tagstash.tags import is_known_tag
from tagstash.types import CacheStats, Duration, MutationResult, QueryConfig

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

_COUNTERS = ("hits", "misses", "sets", "deletes", "invalidations", "invalidated_keys")


class _Flight:
    """A load in progress for one key."""

    __slots__ = ("done", "error", "result")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Any = None
        self.error: BaseException | None = None


class TaggedCache:
    """Result cache with tag-indexed bulk invalidation.

    Entries expire at an absolute deadline. Query results are registered under
    the tag of their entity class so a writer can evict all of them without
    knowing their keys. Every operation is safe to call from many threads.
    """

    def __init__(
        self,
        *,
        store: EntryStore | None = None,
        index: TagIndex | None = None,
        default_ttl: Duration = LIST_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store if store is not None else MemoryEntryStore(clock=clock)
        self._index = index if index is not None else MemoryTagIndex()
        self._default_ttl = parse_duration(default_ttl)
        self._in_flight: dict[str, _Flight] = {}
        self._flight_lock = threading.Lock()
        self._counters = dict.fromkeys(_COUNTERS, 0)
        self._stats_lock = threading.Lock()

    @property
    def store(self) -> EntryStore:
        return self._store

    @property
    def index(self) -> TagIndex:
        return self._index

    def _ttl(self, ttl: Duration | None) -> int:
        return self._default_ttl if ttl is None else parse_duration(ttl)

    def _count(self, name: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._counters[name] += amount

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def lookup(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, found)``. Expired entries are not found."""
        entry = self._store.get(key)
        if entry is None:
            self._count("misses")
            return None, False
        self._count("hits")
        return entry.value, True

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` on a miss."""
        value, found = self.lookup(key)
        return value if found else default

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._store.contains(key)

    def set(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Store a value without tagging it.

        Only for single-entity keys that writers evict with ``delete``.
        """
        self._store.set(key, value, self._ttl(ttl))
        self._count("sets")

    def set_and_tag(
        self,
        key: str,
        value: Any,
        tag: str,
        ttl: Duration | None = None,
    ) -> None:
        """Store a value and register its key under ``tag``.

        The entry is written before the membership becomes visible, so an
        invalidation that sees the key also finds the entry to delete.
        """
        if not tag:
            raise ValueError("tag must not be empty")
        if not is_known_tag(tag):
            logger.debug("Tag %r is outside the shared vocabulary", tag)
        self._store.set(key, value, self._ttl(ttl))
        self._index.add(tag, key)
        self._count("sets")

    def delete(self, key: str) -> None:
        """Evict a single key. Tag membership is left untouched."""
        self._store.delete(key)
        self._count("deletes")

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate_tag(self, tag: str) -> list[str]:
        """Evict every key registered under ``tag`` and return those keys.

        Unknown tags are a no-op. All evictions finish before this returns.
        """
        keys = self._index.invalidate(tag)
        for key in keys:
            self._store.delete(key)
        with self._stats_lock:
            self._counters["invalidations"] += 1
            self._counters["invalidated_keys"] += len(keys)
        logger.debug("Invalidated tag %r (%d keys)", tag, len(keys))
        return keys

    def invalidate(self, *tags: str) -> list[str]:
        """Invalidate several tags in order."""
        keys: list[str] = []
        for tag in tags:
            keys.extend(self.invalidate_tag(tag))
        return keys

    def purge_expired(self) -> int:
        """Reclaim expired entries and drop dead keys from every tag.

        Returns the number of entries reclaimed.
        """
        purged = self._store.purge_expired()
        pruned = 0
        for tag in self._index.tags():
            pruned += self._index.prune(tag, self._store.contains)
        logger.debug("Purged %d expired entries, pruned %d tag members", purged, pruned)
        return purged

    def clear(self) -> None:
        """Drop every entry and every tag membership."""
        # Index first: a concurrent set_and_tag can then only leave a member
        # without an entry, never an entry without a member.
        self._index.clear()
        self._store.clear()
        logger.debug("Cache cleared")

    def stats(self) -> CacheStats:
        """Snapshot of counters and sizes."""
        with self._stats_lock:
            counters = dict(self._counters)
        return CacheStats(
            **counters,
            entries=len(self._store),
            tags=len(self._index.tags()),
        )

    # -------------------------------------------------------------------------
    # Read and write paths
    # -------------------------------------------------------------------------

    def fetch(
        self,
        key: str,
        fn: Callable[[], R],
        *,
        tag: str | None = None,
        ttl: Duration | None = None,
    ) -> R:
        """Return the cached value for key, loading it with ``fn`` on a miss.

        Concurrent misses on the same key share one call to ``fn``. Errors
        from ``fn`` propagate and nothing is cached.
        """
        value, found = self.lookup(key)
        if found:
            return cast(R, value)

        def load() -> R:
            # A previous load may have filled the key since our lookup
            entry = self._store.get(key)
            if entry is not None:
                return cast(R, entry.value)
            result = fn()
            if tag is None:
                self.set(key, result, ttl)
            else:
                self.set_and_tag(key, result, tag, ttl)
            return result

        return self._coalesce(key, load)

    def _coalesce(self, key: str, load: Callable[[], R]) -> R:
        """Coalesce concurrent loads for the same key."""
        with self._flight_lock:
            flight = self._in_flight.get(key)
            leader = flight is None
            if flight is None:
                flight = self._in_flight[key] = _Flight()

        if not leader:
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return cast(R, flight.result)

        try:
            flight.result = load()
            return cast(R, flight.result)
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self._flight_lock:
                del self._in_flight[key]
            flight.done.set()

    def query(
        self,
        fn: Callable[P, QueryConfig[R]],
    ) -> Callable[P, R]:
        """Decorator that creates a cached query function."""

        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            config = fn(*args, **kwargs)
            return self.fetch(config.key, config.fn, tag=config.tag, ttl=config.ttl)

        return wrapper

    def mutation(
        self,
        fn: Callable[P, MutationResult[R]],
    ) -> Callable[P, R]:
        """Decorator that runs a write, then evicts what it made stale."""

        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            outcome = fn(*args, **kwargs)
            for key in outcome.deletes:
                self.delete(key)
            self.invalidate(*outcome.invalidates)
            return outcome.result

        return wrapper


def create_cache(
    *,
    shards: int = 16,
    default_ttl: Duration = LIST_TTL,
    clock: Callable[[], float] = time.time,
) -> TaggedCache:
    """Create a cache backed by the in-memory store and index.

    Args:
        shards: Number of independently locked entry-store shards
        default_ttl: TTL used when a call does not pass one
        clock: Wall clock in seconds, injectable for tests

    Returns:
        TaggedCache to construct once per process and hand to repositories
    """
    return TaggedCache(
        store=MemoryEntryStore(shards=shards, clock=clock),
        index=MemoryTagIndex(),
        default_ttl=default_ttl,
        clock=clock,
    )


__all__ = ["TaggedCache", "create_cache"]

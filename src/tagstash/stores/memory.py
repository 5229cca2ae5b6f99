"""In-memory entry store and tag index."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tagstash.types import Entry


@dataclass
class _Shard:
    entries: dict[str, Entry[object]] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)


class MemoryEntryStore:
    """Sharded in-memory entry store with lazy expiry.

    Each shard owns its own lock, so unrelated keys rarely contend. Expired
    entries are misses as soon as their deadline passes; the slot itself is
    reclaimed on the next ``get`` of that key or by ``purge_expired``.
    """

    def __init__(
        self,
        *,
        shards: int = 16,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards = [_Shard() for _ in range(shards)]
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock() * 1000)

    def _shard(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def get(self, key: str) -> Entry[object] | None:
        """Get a live entry by key."""
        shard = self._shard(key)
        now = self._now()
        with shard.lock:
            entry = shard.entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del shard.entries[key]
                return None
            return entry

    def set(self, key: str, value: object, ttl: int) -> None:
        """Store a value for ``ttl`` milliseconds."""
        now = self._now()
        entry: Entry[object] = Entry(value=value, created_at=now, expires_at=now + ttl)
        shard = self._shard(key)
        with shard.lock:
            shard.entries[key] = entry

    def delete(self, key: str) -> None:
        """Delete an entry."""
        shard = self._shard(key)
        with shard.lock:
            shard.entries.pop(key, None)

    def contains(self, key: str) -> bool:
        """Check for a live entry without reclaiming anything."""
        shard = self._shard(key)
        now = self._now()
        with shard.lock:
            entry = shard.entries.get(key)
            return entry is not None and not entry.is_expired(now)

    def purge_expired(self) -> int:
        """Drop expired entries from every shard."""
        now = self._now()
        purged = 0
        for shard in self._shards:
            with shard.lock:
                expired = [k for k, e in shard.entries.items() if e.is_expired(now)]
                for key in expired:
                    del shard.entries[key]
                purged += len(expired)
        return purged

    def clear(self) -> None:
        """Drop every entry."""
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total


class MemoryTagIndex:
    """In-memory tag index guarded by a single lock.

    Invalidation swaps the member set for an empty one under the lock, so an
    ``add`` racing with it is either part of the returned snapshot or kept for
    the next invalidation.
    """

    def __init__(self, *, prune_batch: int = 256) -> None:
        if prune_batch < 1:
            raise ValueError("prune_batch must be at least 1")
        self._tags: dict[str, set[str]] = {}
        self._lock = threading.Lock()
        self._prune_batch = prune_batch

    def add(self, tag: str, key: str) -> None:
        """Register key under tag."""
        with self._lock:
            members = self._tags.get(tag)
            if members is None:
                members = self._tags[tag] = set()
            members.add(key)

    def invalidate(self, tag: str) -> list[str]:
        """Snapshot and clear the members of tag."""
        with self._lock:
            members = self._tags.get(tag)
            if not members:
                return []
            self._tags[tag] = set()
        return list(members)

    def members(self, tag: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._tags.get(tag, ()))

    def tags(self) -> list[str]:
        with self._lock:
            return list(self._tags)

    def size(self, tag: str) -> int:
        with self._lock:
            return len(self._tags.get(tag, ()))

    def prune(self, tag: str, is_live: Callable[[str], bool]) -> int:
        """Drop members for which ``is_live`` is false.

        Members are checked in batches of ``prune_batch``, taking the lock once
        per batch so writers are not held up for a whole sweep. ``is_live`` is
        called with the lock held, so a concurrent ``add`` for the same key
        cannot be lost between the check and the removal.
        """
        with self._lock:
            candidates = list(self._tags.get(tag, ()))
        pruned = 0
        for start in range(0, len(candidates), self._prune_batch):
            batch = candidates[start : start + self._prune_batch]
            with self._lock:
                # Re-read: an invalidation may have swapped the set meanwhile
                members = self._tags.get(tag)
                if not members:
                    break
                dead = [k for k in batch if k in members and not is_live(k)]
                members.difference_update(dead)
            pruned += len(dead)
        return pruned

    def clear(self) -> None:
        with self._lock:
            self._tags.clear()

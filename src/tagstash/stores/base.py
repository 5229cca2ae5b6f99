"""Base protocols for entry stores and tag indexes."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from tagstash.types import Entry


@runtime_checkable
class EntryStore(Protocol):
    """Thread-safe key to entry map with absolute expiry."""

    def get(self, key: str) -> Entry[object] | None:
        """Get a live entry by key. Expired entries are misses."""
        ...

    def set(self, key: str, value: object, ttl: int) -> None:
        """Store a value for ``ttl`` milliseconds, replacing any entry."""
        ...

    def delete(self, key: str) -> None:
        """Delete an entry. No-op if absent."""
        ...

    def contains(self, key: str) -> bool:
        """Check whether a live entry exists for key."""
        ...

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...

    def __len__(self) -> int: ...


@runtime_checkable
class TagIndex(Protocol):
    """Thread-safe tag to member-key map."""

    def add(self, tag: str, key: str) -> None:
        """Register key under tag, creating the tag if unseen."""
        ...

    def invalidate(self, tag: str) -> list[str]:
        """Atomically snapshot and clear the members of tag."""
        ...

    def members(self, tag: str) -> frozenset[str]:
        """Current members of tag."""
        ...

    def tags(self) -> list[str]:
        """Every tag name seen so far."""
        ...

    def size(self, tag: str) -> int:
        """Number of members of tag."""
        ...

    def prune(self, tag: str, is_live: Callable[[str], bool]) -> int:
        """Drop members for which ``is_live`` is false."""
        ...

    def clear(self) -> None:
        """Forget every tag and membership."""
        ...

"""Storage backends for the tagstash cache."""

from tagstash.stores.base import EntryStore, TagIndex
from tagstash.stores.memory import MemoryEntryStore, MemoryTagIndex

__all__ = [
    "EntryStore",
    "MemoryEntryStore",
    "MemoryTagIndex",
    "TagIndex",
]

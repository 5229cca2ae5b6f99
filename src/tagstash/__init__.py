"""tagstash - In-process result cache with tag-indexed bulk invalidation."""

import logging

from tagstash import tags

# Coordinator
from tagstash.cache import TaggedCache, create_cache

# Duration parsing
from tagstash.duration import format_duration, parse_duration

# Key convention
from tagstash.keys import LIST_TTL, WINDOW_TTL, KeyBuilder, search_terms

# Storage backends
from tagstash.stores import (
    EntryStore,
    MemoryEntryStore,
    MemoryTagIndex,
    TagIndex,
)

# Core types
from tagstash.types import (
    CacheStats,
    Duration,
    Entry,
    MutationResult,
    QueryConfig,
    Tag,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "LIST_TTL",
    "WINDOW_TTL",
    "CacheStats",
    "Duration",
    "Entry",
    "EntryStore",
    "KeyBuilder",
    "MemoryEntryStore",
    "MemoryTagIndex",
    "MutationResult",
    "QueryConfig",
    "Tag",
    "TagIndex",
    "TaggedCache",
    "create_cache",
    "format_duration",
    "parse_duration",
    "search_terms",
    "tags",
]

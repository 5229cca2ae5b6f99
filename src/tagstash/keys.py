"""Cache key convention and TTL policy.

Keys are plain strings built from the parts that affect a result set:

    entity key   plan_42
    search key   websites_7_bar+foo_2      (scope 7, terms "foo bar", page 2)
    window key   threads_7_~7d             (scope 7, last 7 days)

Identical logical parameters always give the identical string. Search text is
split on whitespace, deduplicated and sorted, so word order and spacing do not
produce distinct keys. Dynamic parts are escaped, so an id containing ``_``
cannot be mistaken for two parts. The window part starts with an unescaped
``~``, which no escaped id or search term can, so window keys never alias
entity or search keys.

Entity keys are evicted directly with ``TaggedCache.delete``. Search and window
keys must be stored with ``TaggedCache.set_and_tag`` under their entity class
tag, otherwise no invalidation can reach them.
"""

from tagstash.duration import format_duration
from tagstash.types import Duration

# Stable list and detail queries
LIST_TTL = "1d"
# Rolling time-window aggregates ("last N days"); what counts as recent
# shifts every minute even without writes
WINDOW_TTL = "10m"

_SEPARATOR = "_"
_TERM_SEPARATOR = "+"
_WINDOW_MARKER = "~"
_ESCAPE_MAP = {
    "\\": "\\\\",
    _SEPARATOR: "\\_",
    _TERM_SEPARATOR: "\\+",
    _WINDOW_MARKER: "\\~",
}


def escape_part(part: object) -> str:
    """Escape separator characters inside a dynamic key part."""
    result = str(part)
    for char, escaped in _ESCAPE_MAP.items():
        result = result.replace(char, escaped)
    return result


def search_terms(search: str | None) -> tuple[str, ...]:
    """Normalise free-text search into a sorted tuple of distinct tokens."""
    if not search:
        return ()
    return tuple(sorted(set(search.split())))


class KeyBuilder:
    """Builds cache keys under an optional namespace.

    Example:
        keys = KeyBuilder(namespace="fc")
        keys.entity("plan", 42)                              # fc_plan_42
        keys.search("plans", search="pro  basic", page=2)    # fc_plans_basic+pro_2
        keys.window("threads", member_id, window="7d")       # fc_threads_5_~7d
    """

    def __init__(self, namespace: str = "") -> None:
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def _join(self, entity: str, parts: list[str]) -> str:
        if not entity:
            raise ValueError("entity must not be empty")
        head = [self._namespace, entity] if self._namespace else [entity]
        return _SEPARATOR.join(head + parts)

    def entity(self, entity: str, entity_id: object) -> str:
        """Key for a single record, e.g. ``plan_42``."""
        return self._join(entity, [escape_part(entity_id)])

    def search(
        self,
        entity: str,
        *scope: object,
        search: str | None = None,
        page: int = 1,
    ) -> str:
        """Key for a filtered, paginated list.

        ``scope`` holds owning ids (member, website, thread). Pages below 1
        are the first page.
        """
        terms = _TERM_SEPARATOR.join(escape_part(t) for t in search_terms(search))
        parts = [escape_part(s) for s in scope]
        parts.append(terms)
        parts.append(str(max(page, 1)))
        return self._join(entity, parts)

    def window(self, entity: str, *scope: object, window: Duration) -> str:
        """Key for an aggregate over a rolling time window."""
        parts = [escape_part(s) for s in scope]
        parts.append(_WINDOW_MARKER + format_duration(window))
        return self._join(entity, parts)


__all__ = [
    "LIST_TTL",
    "WINDOW_TTL",
    "KeyBuilder",
    "escape_part",
    "search_terms",
]

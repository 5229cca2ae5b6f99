"""Tag vocabulary.

One tag per entity class whose writes make derived query results stale. A
mutator of class X invalidates X after every successful create, update or
delete, whether or not anything was ever cached under it.
"""

from tagstash.types import Tag

MESSAGES = Tag("messages")
THREADS = Tag("threads")
PLANS = Tag("plans")
WEBSITES = Tag("websites")
SUBSCRIPTIONS = Tag("subscriptions")
MEMBERS = Tag("members")
TRANSACTIONS = Tag("transactions")
EVENTS = Tag("events")

VOCABULARY: frozenset[str] = frozenset(
    {
        MESSAGES,
        THREADS,
        PLANS,
        WEBSITES,
        SUBSCRIPTIONS,
        MEMBERS,
        TRANSACTIONS,
        EVENTS,
    }
)


def is_known_tag(tag: str) -> bool:
    """Check whether a tag belongs to the shared vocabulary."""
    return tag in VOCABULARY

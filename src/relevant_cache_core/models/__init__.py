"""Public model re-exports for relevant_cache_core."""

from relevant_cache_core.models.entry import Entry
from relevant_cache_core.models.item import Item, StorableValue, make_key, to_bytes

__all__ = [
    "Entry",
    "Item",
    "StorableValue",
    "make_key",
    "to_bytes",
]

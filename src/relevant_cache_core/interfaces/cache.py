"""Backend contract shared by every relevant-cache storage implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from relevant_cache_core.keys import KeyLike
from relevant_cache_core.models.entry import Entry
from relevant_cache_core.models.item import Item, StorableValue


@runtime_checkable
class RelevantCache(Protocol):
    """Dependency-aware cache; implementations can be swapped.

    Every key argument may be a str, bytes, or an Item (only its key is
    used). Deleting a key also deletes everything that depends on it.
    """

    def get(self, key: KeyLike) -> bytes:
        """Return the raw value; raise NotFound if absent or expired."""
        ...

    def set(self, entry: Item | Entry) -> None:
        """Store an Item (with its dependencies) or a plain Entry."""
        ...

    def delete(self, *keys: KeyLike) -> None:
        """Delete each key's dependency closure, blocking until removed."""
        ...

    def unlink(self, *keys: KeyLike) -> None:
        """Like delete, but let the store reclaim memory asynchronously."""
        ...

    def resolve(self, key: KeyLike) -> list[str]:
        """Return the dependency closure of a key without deleting it."""
        ...

    def increment(self, key: KeyLike) -> int:
        """Increment a decimal counter, creating it at 1; return the new value."""
        ...

    def mget(self, *keys: KeyLike) -> list[bytes | None]:
        """Return raw values aligned with ``keys``; None for missing ones."""
        ...

    def hset(self, key: KeyLike, field: str, value: StorableValue) -> None:
        """Store a field in the hash at ``key``."""
        ...

    def hlen(self, key: KeyLike) -> int:
        """Return the number of fields in the hash at ``key``."""
        ...

    def hget(self, key: KeyLike, field: str) -> bytes:
        """Return a hash field's raw value; raise NotFound if absent."""
        ...

    def purge(self) -> None:
        """Remove every key from the store."""
        ...

    def close(self) -> None:
        """Release backend resources; safe to call more than once."""
        ...

    def dump(self) -> list[str]:
        """Return the stored keys (diagnostics only)."""
        ...

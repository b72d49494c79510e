"""Item model: a pending cache write with its declared dependencies."""

from __future__ import annotations

from relevant_cache_core import codec
from relevant_cache_core.constants import KEY_DELIMITER, WILDCARD
from relevant_cache_core.exceptions import InsufficientArguments, TypeMismatch

StorableValue = str | bytes


def make_key(*parts: object) -> str:
    """Build the canonical cache key from an ordered sequence of parts.

    Strings are used verbatim, bytes are decoded as UTF-8 and everything
    else goes through ``str()``. The same parts always yield the same key.
    """
    if not parts:
        msg = "a cache key needs at least one part"
        raise InsufficientArguments(msg)
    return KEY_DELIMITER.join(_part_text(p) for p in parts)


def to_bytes(value: StorableValue | None) -> bytes:
    """Convert a storable value to the bytes written to the backend."""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    msg = f"value must be str or bytes, got {type(value).__name__}"
    raise TypeMismatch(msg)


def _part_text(part: object) -> str:
    if isinstance(part, bytes):
        return part.decode("utf-8")
    return str(part)


class Item:
    """A cache entry descriptor: key, dependencies, TTL, and value.

    The key is fixed at construction. Dependencies are appended with
    ``relevant_to`` and never removed::

        item = Item("user", 42).with_value("...").relevant_to("team", 7)
        item.relevant_to("session", wildcard=True)  # depends on "session*"
    """

    __slots__ = ("_key", "_relevant", "_ttl", "_value")

    def __init__(self, *parts: object) -> None:
        """Derive the key from ``parts`` (see ``make_key``)."""
        self._key = make_key(*parts)
        self._relevant: list[Item] = []
        self._ttl = 0
        self._value: StorableValue | None = None

    @classmethod
    def wildcard(cls, *parts: object) -> Item:
        """Create an item whose key ends with the wildcard marker."""
        item = cls(*parts)
        if not item._key.endswith(WILDCARD):
            item._key += WILDCARD
        return item

    @property
    def key(self) -> str:
        """The cache key."""
        return self._key

    @property
    def relevant(self) -> tuple[Item, ...]:
        """Declared dependencies, in declaration order."""
        return tuple(self._relevant)

    @property
    def relevant_keys(self) -> list[str]:
        """Keys of the declared dependencies, in declaration order."""
        return [r.key for r in self._relevant]

    @property
    def ttl(self) -> int:
        """Seconds until expiry; 0 means never."""
        return self._ttl

    @property
    def value(self) -> StorableValue | None:
        """The payload to store."""
        return self._value

    @property
    def is_wildcard(self) -> bool:
        """True when the key is a pattern rather than a literal key."""
        return WILDCARD in self._key

    def relevant_to(self, *parts: object, wildcard: bool = False) -> Item:
        """Declare a dependency built from ``parts``; returns self for chaining."""
        child = Item.wildcard(*parts) if wildcard else Item(*parts)
        self._relevant.append(child)
        return self

    def with_ttl(self, ttl: int) -> Item:
        """Set the TTL in seconds; returns self for chaining."""
        if isinstance(ttl, bool) or not isinstance(ttl, int):
            msg = f"ttl must be an int, got {type(ttl).__name__}"
            raise TypeMismatch(msg)
        if ttl < 0:
            msg = f"ttl must not be negative, got {ttl}"
            raise TypeMismatch(msg)
        self._ttl = ttl
        return self

    def with_value(self, value: StorableValue) -> Item:
        """Set the payload; returns self for chaining."""
        to_bytes(value)
        self._value = value
        return self

    def encode(self) -> bytes:
        """Produce the tagged blob stored under this item's key."""
        return codec.encode(self.relevant_keys, to_bytes(self._value))

    def __repr__(self) -> str:
        return f"Item(key={self._key!r}, relevant={self.relevant_keys!r}, ttl={self._ttl})"

"""Turn the public write arguments into (key, blob, ttl) for a backend."""

from __future__ import annotations

from typing import NamedTuple

from relevant_cache_core import codec
from relevant_cache_core.exceptions import InsufficientArguments, TypeMismatch
from relevant_cache_core.keys import resolve_key
from relevant_cache_core.models.entry import Entry
from relevant_cache_core.models.item import Item, StorableValue, to_bytes


class PreparedWrite(NamedTuple):
    """A write ready to hand to a storage primitive."""

    key: str
    blob: bytes
    ttl: int
    dependencies: list[str]


def prepare_set(entry: Item | Entry | None) -> PreparedWrite:
    """Validate a Set argument and encode it.

    An ``Item`` is stored tagged with its dependency keys; an ``Entry`` is
    stored as its raw value.
    """
    if entry is None:
        msg = "set requires an Item or an Entry"
        raise InsufficientArguments(msg)
    if isinstance(entry, Item):
        return PreparedWrite(entry.key, entry.encode(), entry.ttl, entry.relevant_keys)
    if isinstance(entry, Entry):
        return PreparedWrite(entry.key, to_bytes(entry.value), entry.ttl, [])
    msg = f"set accepts an Item or an Entry, got {type(entry).__name__}"
    raise TypeMismatch(msg)


def prepare_hash_value(key: object, value: StorableValue) -> tuple[str, bytes]:
    """Encode a hash field value; an Item key contributes its dependencies."""
    name = resolve_key(key)
    raw = to_bytes(value)
    if isinstance(key, Item) and key.relevant:
        return name, codec.encode(key.relevant_keys, raw)
    return name, raw


def next_counter(key: str, blob: bytes) -> tuple[int, bytes]:
    """Add one to the decimal counter in a stored blob.

    Returns the new value and the blob to store back. A tagged counter
    keeps its dependency list.

    Raises:
        TypeMismatch: If the raw value is not a decimal integer.
    """
    deps, raw = codec.decode(blob)
    try:
        value = int(raw.decode("ascii")) + 1
    except (UnicodeDecodeError, ValueError) as exc:
        msg = f"value at {key!r} is not a decimal integer"
        raise TypeMismatch(msg) from exc
    new_raw = str(value).encode("ascii")
    return value, new_raw if deps is None else codec.encode(deps, new_raw)

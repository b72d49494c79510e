"""Stored-record codec: dependency keys framed ahead of the raw value.

Tagged layout::

    SIGNATURE(2) | LEN(2, big-endian) | DEP_LIST(LEN) | RAW_VALUE

Anything that does not start with the signature is an untagged value with
no dependencies, so keys written by other clients stay readable.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from relevant_cache_core.constants import (
    DEPENDENCY_DELIMITER,
    HEADER_SIZE,
    MAX_DEPENDENCY_BYTES,
    SIGNATURE,
)
from relevant_cache_core.exceptions import MalformedRecord

_LENGTH = struct.Struct(">H")


def encode(dependency_keys: Iterable[str], value: bytes) -> bytes:
    """Frame dependency keys and a raw value into one tagged blob.

    Raises:
        ValueError: If the joined dependency list does not fit the 16-bit
            length field. Callers must keep dependency lists below this limit.
    """
    deps = DEPENDENCY_DELIMITER.join(dependency_keys).encode("utf-8")
    if len(deps) > MAX_DEPENDENCY_BYTES:
        msg = f"dependency list is {len(deps)} bytes, limit is {MAX_DEPENDENCY_BYTES}"
        raise ValueError(msg)
    return SIGNATURE + _LENGTH.pack(len(deps)) + deps + value


def decode(blob: bytes) -> tuple[list[str] | None, bytes]:
    """Split a stored blob into (dependency keys, raw value).

    Returns ``(None, blob)`` for untagged data, including blobs that carry the
    signature but whose dependency list is not valid UTF-8. An empty
    dependency list in a tagged record decodes to ``[]``.

    Raises:
        MalformedRecord: If the signature matches but the length field
            points past the end of the blob.
    """
    if len(blob) < HEADER_SIZE or blob[: len(SIGNATURE)] != SIGNATURE:
        return None, blob
    (size,) = _LENGTH.unpack_from(blob, len(SIGNATURE))
    end = HEADER_SIZE + size
    if end > len(blob):
        msg = f"length field says {size} bytes, only {len(blob) - HEADER_SIZE} present"
        raise MalformedRecord(msg)
    try:
        deps = blob[HEADER_SIZE:end].decode("utf-8")
    except UnicodeDecodeError:
        return None, blob
    keys = deps.split(DEPENDENCY_DELIMITER) if deps else []
    return keys, blob[end:]


def dependencies_of(blob: bytes) -> list[str]:
    """Return only the dependency keys of a blob (empty for untagged data)."""
    keys, _ = decode(blob)
    return keys or []


def value_of(blob: bytes) -> bytes:
    """Return only the raw value of a blob."""
    _, value = decode(blob)
    return value

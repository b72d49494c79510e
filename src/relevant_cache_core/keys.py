"""Key argument normalization and wildcard matching."""

from __future__ import annotations

import re

from relevant_cache_core.constants import WILDCARD
from relevant_cache_core.exceptions import InvalidKeyType, PatternError
from relevant_cache_core.models.item import Item

KeyLike = str | bytes | Item


def resolve_key(key: object) -> str:
    """Return the string key for a str, bytes, or Item argument."""
    if isinstance(key, Item):
        return key.key
    if isinstance(key, str):
        return key
    if isinstance(key, bytes):
        return key.decode("utf-8")
    msg = f"invalid key type {type(key).__name__}: accepts str, bytes, or Item"
    raise InvalidKeyType(msg)


def is_wildcard(key: str) -> bool:
    """Check whether a key is a wildcard pattern."""
    return WILDCARD in key


def wildcard_regex(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard key into an anchored regex.

    ``*`` matches any substring and every other character is literal.
    """
    source = ".*".join(re.escape(chunk) for chunk in pattern.split(WILDCARD))
    try:
        return re.compile(f"^{source}$", re.DOTALL)
    except re.error as exc:
        msg = f"cannot build match pattern from {pattern!r}: {exc}"
        raise PatternError(msg) from exc


def glob_escape(pattern: str) -> str:
    """Escape Redis glob syntax other than ``*`` so it matches literally.

    Redis KEYS and SCAN MATCH also treat ``?``, ``[``, ``]`` and ``\\`` as
    glob syntax; wildcard keys only give meaning to ``*``.
    """
    return re.sub(r"([?\[\]\\])", r"\\\1", pattern)

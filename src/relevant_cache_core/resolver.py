"""Dependency-closure resolution.

Given a root key, walk the declared dependencies (expanding wildcard
patterns against the keys currently stored) and collect every key that
must be removed together with the root.

Backends only provide two primitives through ``RecordSource``; the walk
itself, and its policies, live here so both backends behave the same:

- a missing or expired node is still part of the result but has no
  children, so deleting an absent key is a no-op;
- a malformed record stops the expansion of that node only;
- a literal dependency reached again while it is still on the current
  path raises ``CyclicDependency``;
- a wildcard match or pattern that is already on the current path is
  skipped, since it is already being removed (``user_1`` may depend on
  ``user*``);
- every key appears once, at its first (depth-first, pre-order) position.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol

import structlog

from relevant_cache_core import codec
from relevant_cache_core.exceptions import CyclicDependency, MalformedRecord
from relevant_cache_core.keys import is_wildcard

logger = structlog.get_logger()


class RecordSource(Protocol):
    """Read-only view of a backend used by the resolver."""

    def read_records(self, key: str) -> list[bytes] | None:
        """Return the stored blobs for a key, or None if absent/expired.

        A scalar key yields one blob; a hash key yields one per field.
        """
        ...

    def match_keys(self, pattern: str) -> list[str]:
        """Return the stored keys matching a wildcard pattern, in any order."""
        ...


class _Node(NamedTuple):
    key: str
    pattern: bool
    path: tuple[str, ...]


class ClosureResolver:
    """Resolve the full deletion set for a root key.

    Each visited node costs one ``read_records`` or ``match_keys`` call on
    the source. Against a networked store that is one round trip per node,
    so latency grows with chain depth and wildcard fan-out; keep chains
    shallow.
    """

    def __init__(self, source: RecordSource, log: Any = None) -> None:  # noqa: ANN401
        """Initialize with the backend view and an optional bound logger."""
        self._source = source
        self._log = log if log is not None else logger

    def resolve(self, root: str) -> list[str]:
        """Return the root key and everything that depends on it, deduplicated.

        Order is self-before-children with children in declaration order;
        keys from a wildcard expansion follow the source's listing order.

        Raises:
            CyclicDependency: If a literal dependency chain leads back onto itself.
        """
        result: list[str] = []
        done: set[tuple[str, bool]] = set()
        stack = [_Node(root, is_wildcard(root), ())]

        while stack:
            node = stack.pop()
            if not node.pattern and node.key in node.path:
                raise CyclicDependency([*node.path, node.key])
            if (node.key, node.pattern) in done:
                continue
            done.add((node.key, node.pattern))

            if node.pattern:
                children = self._source.match_keys(node.key)
                self._log.debug("closure_wildcard_expanded", pattern=node.key, matches=children)
                # Matches are stored keys, never patterns themselves
                child_nodes = [
                    _Node(k, False, (*node.path, node.key))
                    for k in children
                    if k not in node.path
                ]
            else:
                result.append(node.key)
                children = self._children_of(node.key)
                child_nodes = [
                    _Node(k, is_wildcard(k), (*node.path, node.key)) for k in children
                ]

            stack.extend(reversed(child_nodes))

        self._log.debug("closure_resolved", root=root, keys=result)
        return result

    def _children_of(self, key: str) -> list[str]:
        """Collect the declared dependency keys stored under ``key``."""
        blobs = self._source.read_records(key)
        if blobs is None:
            self._log.debug("closure_node_missing", key=key)
            return []
        children: list[str] = []
        for blob in blobs:
            try:
                children.extend(codec.dependencies_of(blob))
            except MalformedRecord as exc:
                self._log.warning("closure_branch_malformed", key=key, error=str(exc))
        return children

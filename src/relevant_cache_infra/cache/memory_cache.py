"""In-process implementation of RelevantCache with lazy TTL expiry."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import TextIO

from relevant_cache_core import codec
from relevant_cache_core.exceptions import NotFound, TypeMismatch
from relevant_cache_core.keys import KeyLike, resolve_key, wildcard_regex
from relevant_cache_core.models.entry import Entry
from relevant_cache_core.models.item import Item, StorableValue
from relevant_cache_core.records import next_counter, prepare_hash_value, prepare_set
from relevant_cache_core.resolver import ClosureResolver
from relevant_cache_infra.observability.logging import make_debug_logger


@dataclass
class _Record:
    """A stored blob and its expiration instant on the cache clock."""

    data: bytes
    expires_at: float | None = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCache:
    """Thread-safe in-process cache.

    All map access goes through one lock. Expired keys are evicted when they
    are next touched, never by a background sweep. Closure resolution takes
    the lock once per visited node, so it is not isolated from concurrent
    writers.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        debug_writer: TextIO | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            clock: Monotonic seconds source used for TTL bookkeeping.
            debug_writer: Optional stream receiving debug events.
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, _Record] = {}
        self._hashes: dict[str, dict[str, bytes]] = {}
        self._log = make_debug_logger(debug_writer, backend="memory")
        self._resolver = ClosureResolver(self, self._log)

    def __enter__(self) -> MemoryCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --- RecordSource ---

    def read_records(self, key: str) -> list[bytes] | None:
        """Return the blobs stored under a key, evicting it if expired."""
        with self._lock:
            fields = self._hashes.get(key)
            if fields is not None:
                return list(fields.values())
            record = self._live(key)
            return None if record is None else [record.data]

    def match_keys(self, pattern: str) -> list[str]:
        """Scan every key against a wildcard pattern, evicting expired matches."""
        regex = wildcard_regex(pattern)
        now = self._clock()
        matches: list[str] = []
        with self._lock:
            for key, record in list(self._data.items()):
                if not regex.match(key):
                    continue
                if record.expired(now):
                    del self._data[key]
                    continue
                matches.append(key)
            matches.extend(k for k in self._hashes if regex.match(k))
        return matches

    # --- RelevantCache ---

    def get(self, key: KeyLike) -> bytes:
        """Retrieve the raw value stored under a key."""
        name = resolve_key(key)
        with self._lock:
            if name in self._hashes:
                msg = f"key {name!r} holds a hash"
                raise TypeMismatch(msg)
            record = self._live(name)
        if record is None:
            msg = f"record does not exist for key: {name}"
            raise NotFound(msg)
        return codec.value_of(record.data)

    def set(self, entry: Item | Entry) -> None:
        """Store an Item or Entry, replacing whatever the key held."""
        write = prepare_set(entry)
        expires_at = self._clock() + write.ttl if write.ttl > 0 else None
        with self._lock:
            self._hashes.pop(write.key, None)
            self._data[write.key] = _Record(write.blob, expires_at)
        self._log.debug("cache_set", key=write.key, relevant=write.dependencies, ttl=write.ttl)

    def delete(self, *keys: KeyLike) -> None:
        """Delete every key in the closures of ``keys``."""
        self._remove("cache_del", keys)

    def unlink(self, *keys: KeyLike) -> None:
        """Same as delete; removal from a dict is already immediate."""
        self._remove("cache_unlink", keys)

    def resolve(self, key: KeyLike) -> list[str]:
        """Return the closure of a key without deleting anything."""
        return self._resolver.resolve(resolve_key(key))

    def increment(self, key: KeyLike) -> int:
        """Add one to a decimal counter, creating it at 1; keeps any TTL."""
        name = resolve_key(key)
        with self._lock:
            if name in self._hashes:
                msg = f"key {name!r} holds a hash"
                raise TypeMismatch(msg)
            record = self._live(name)
            if record is None:
                self._data[name] = _Record(b"1")
                return 1
            value, record.data = next_counter(name, record.data)
            return value

    def mget(self, *keys: KeyLike) -> list[bytes | None]:
        """Fetch several raw values; missing, expired, or hash keys yield None."""
        names = [resolve_key(k) for k in keys]
        with self._lock:
            records = [self._live(n) for n in names]
        return [None if r is None else codec.value_of(r.data) for r in records]

    def hset(self, key: KeyLike, field: str, value: StorableValue) -> None:
        """Store a hash field; an Item key attaches its dependencies."""
        name, blob = prepare_hash_value(key, value)
        with self._lock:
            if self._live(name) is not None:
                msg = f"key {name!r} holds a scalar value"
                raise TypeMismatch(msg)
            self._hashes.setdefault(name, {})[field] = blob
        self._log.debug("cache_hset", key=name, field=field)

    def hlen(self, key: KeyLike) -> int:
        """Count the fields of a hash; 0 if the key is absent."""
        name = resolve_key(key)
        with self._lock:
            if self._live(name) is not None:
                msg = f"key {name!r} holds a scalar value"
                raise TypeMismatch(msg)
            return len(self._hashes.get(name, {}))

    def hget(self, key: KeyLike, field: str) -> bytes:
        """Retrieve a hash field's raw value."""
        name = resolve_key(key)
        with self._lock:
            blob = self._hashes.get(name, {}).get(field)
        if blob is None:
            msg = f"field {field!r} does not exist for key: {name}"
            raise NotFound(msg)
        return codec.value_of(blob)

    def purge(self) -> None:
        """Remove every key."""
        with self._lock:
            self._data.clear()
            self._hashes.clear()
        self._log.debug("cache_purge")

    def close(self) -> None:
        """Nothing to release; stored data is kept and repeated calls are no-ops."""
        self._log.debug("cache_close")

    def dump(self) -> list[str]:
        """Return the live keys, sorted."""
        now = self._clock()
        with self._lock:
            for key in [k for k, r in self._data.items() if r.expired(now)]:
                del self._data[key]
            return sorted([*self._data, *self._hashes])

    # --- internals ---

    def _live(self, key: str) -> _Record | None:
        """Return the record for a key or None, evicting it if expired.

        Caller must hold the lock.
        """
        record = self._data.get(key)
        if record is None:
            return None
        if record.expired(self._clock()):
            del self._data[key]
            return None
        return record

    def _remove(self, event: str, keys: tuple[KeyLike, ...]) -> None:
        names = [resolve_key(k) for k in keys]
        targets = list(dict.fromkeys(k for name in names for k in self._resolver.resolve(name)))
        if not targets:
            self._log.debug(event, keys=targets, skipped=True)
            return
        with self._lock:
            for key in targets:
                self._data.pop(key, None)
                self._hashes.pop(key, None)
        self._log.debug(event, keys=targets)

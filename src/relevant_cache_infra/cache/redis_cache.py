"""Redis-backed implementation of RelevantCache."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import TextIO
from urllib.parse import urlparse

from redis import Redis
from redis.exceptions import RedisError, ResponseError

from relevant_cache_core import codec
from relevant_cache_core.constants import TLS_SCHEMES
from relevant_cache_core.exceptions import NotFound, TransportFailure, TypeMismatch
from relevant_cache_core.keys import KeyLike, glob_escape, resolve_key
from relevant_cache_core.models.entry import Entry
from relevant_cache_core.models.item import Item, StorableValue
from relevant_cache_core.records import next_counter, prepare_hash_value, prepare_set
from relevant_cache_core.resolver import ClosureResolver
from relevant_cache_infra.observability.logging import make_debug_logger


@contextmanager
def _transport(command: str) -> Iterator[None]:
    """Re-raise redis client errors as TransportFailure."""
    try:
        yield
    except RedisError as exc:
        msg = f"redis {command} failed: {exc}"
        raise TransportFailure(msg) from exc


def _as_bytes(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def _as_str(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisCache:
    """Dependency-aware cache backed by Redis.

    One command per primitive operation. Closure resolution issues one
    round trip per visited node and is not atomic: a key rewritten by
    another client between being read and being deleted is still deleted.
    """

    def __init__(
        self,
        redis: Redis,  # type: ignore[type-arg]
        scan_count: int | None = None,
        debug_writer: TextIO | None = None,
    ) -> None:
        """Initialize with a synchronous redis-py client.

        The client must return bytes (``decode_responses=False``).

        Args:
            redis: Connected client.
            scan_count: List wildcard matches with SCAN and this COUNT hint
                instead of KEYS.
            debug_writer: Optional stream receiving debug events.
        """
        self._redis = redis
        self._scan_count = scan_count
        self._closed = False
        self._log = make_debug_logger(debug_writer, backend="redis")
        self._resolver = ClosureResolver(self, self._log)

    @classmethod
    def connect(
        cls,
        endpoint: str,
        skip_tls_verify: bool = False,
        scan_count: int | None = None,
        debug_writer: TextIO | None = None,
    ) -> RedisCache:
        """Open a connection to ``endpoint`` and verify it with PING.

        ``tls://host:port`` and ``rediss://host:port`` connect over TLS,
        ``redis://host:port`` in plaintext.
        """
        url = urlparse(endpoint)
        options: dict[str, object] = {}
        if url.scheme in TLS_SCHEMES:
            endpoint = url._replace(scheme="rediss").geturl()
            options["ssl_cert_reqs"] = "none" if skip_tls_verify else "required"
            options["ssl_check_hostname"] = not skip_tls_verify

        client = Redis.from_url(endpoint, **options)
        try:
            with _transport("PING"):
                pong = client.ping()
        except TransportFailure:
            client.close()
            raise
        if not pong:
            client.close()
            msg = f"no PONG from {url.hostname}"
            raise TransportFailure(msg)
        return cls(client, scan_count=scan_count, debug_writer=debug_writer)

    def __enter__(self) -> RedisCache:
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
        """GET a key; a key holding a hash is read with HVALS instead."""
        with _transport("GET"):
            try:
                blob = self._redis.get(key)
            except ResponseError as exc:
                if not str(exc).startswith("WRONGTYPE"):
                    raise
                return [_as_bytes(v) for v in self._redis.hvals(key)]
        return None if blob is None else [_as_bytes(blob)]

    def match_keys(self, pattern: str) -> list[str]:
        """List keys matching a pattern with KEYS, or SCAN when configured.

        Only ``*`` is a wildcard; any other glob character is escaped.
        """
        glob = glob_escape(pattern)
        if self._scan_count is None:
            with _transport("KEYS"):
                found = self._redis.keys(glob)
        else:
            with _transport("SCAN"):
                found = list(self._redis.scan_iter(match=glob, count=self._scan_count))
        return [_as_str(k) for k in found]

    # --- RelevantCache ---

    def get(self, key: KeyLike) -> bytes:
        """Retrieve the raw value stored under a key."""
        name = resolve_key(key)
        with _transport("GET"):
            blob = self._redis.get(name)
        if blob is None:
            msg = f"record does not exist for key: {name}"
            raise NotFound(msg)
        return codec.value_of(_as_bytes(blob))

    def set(self, entry: Item | Entry) -> None:
        """SET an Item or Entry, with EX when it carries a TTL."""
        write = prepare_set(entry)
        with _transport("SET"):
            self._redis.set(write.key, write.blob, ex=write.ttl or None)
        self._log.debug("cache_set", key=write.key, relevant=write.dependencies, ttl=write.ttl)

    def delete(self, *keys: KeyLike) -> None:
        """DEL every key in the closures of ``keys``."""
        targets = self._closure(keys)
        if not targets:
            return
        with _transport("DEL"):
            self._redis.delete(*targets)
        self._log.debug("cache_del", keys=targets)

    def unlink(self, *keys: KeyLike) -> None:
        """UNLINK every key in the closures of ``keys``; memory is reclaimed later."""
        targets = self._closure(keys)
        if not targets:
            return
        with _transport("UNLINK"):
            self._redis.unlink(*targets)
        self._log.debug("cache_unlink", keys=targets)

    def resolve(self, key: KeyLike) -> list[str]:
        """Return the closure of a key without deleting anything."""
        return self._resolver.resolve(resolve_key(key))

    def increment(self, key: KeyLike) -> int:
        """INCR a counter, creating it at 1.

        A counter stored with dependencies is a tagged blob that INCR
        rejects. It is read, bumped and written back with KEEPTTL instead,
        which is not atomic against concurrent writers.

        Raises:
            TypeMismatch: If the key holds a hash or a non-decimal value.
        """
        name = resolve_key(key)
        with _transport("INCR"):
            try:
                return int(self._redis.incr(name))
            except ResponseError as exc:
                if str(exc).startswith("WRONGTYPE"):
                    msg = f"key {name!r} holds a hash"
                    raise TypeMismatch(msg) from exc
                if "not an integer" not in str(exc):
                    raise

        with _transport("GET"):
            blob = self._redis.get(name)
        if blob is None:
            with _transport("INCR"):
                return int(self._redis.incr(name))
        value, new_blob = next_counter(name, _as_bytes(blob))
        with _transport("SET"):
            self._redis.set(name, new_blob, keepttl=True)
        self._log.debug("cache_incr_rewritten", key=name, value=value)
        return value

    def mget(self, *keys: KeyLike) -> list[bytes | None]:
        """MGET several keys; missing ones yield None."""
        names = [resolve_key(k) for k in keys]
        if not names:
            return []
        with _transport("MGET"):
            blobs = self._redis.mget(names)
        return [None if b is None else codec.value_of(_as_bytes(b)) for b in blobs]

    def hset(self, key: KeyLike, field: str, value: StorableValue) -> None:
        """HSET a field; an Item key attaches its dependencies."""
        name, blob = prepare_hash_value(key, value)
        with _transport("HSET"):
            self._redis.hset(name, field, blob)
        self._log.debug("cache_hset", key=name, field=field)

    def hlen(self, key: KeyLike) -> int:
        """HLEN a hash."""
        name = resolve_key(key)
        with _transport("HLEN"):
            return int(self._redis.hlen(name))

    def hget(self, key: KeyLike, field: str) -> bytes:
        """HGET a field's raw value."""
        name = resolve_key(key)
        with _transport("HGET"):
            blob = self._redis.hget(name, field)
        if blob is None:
            msg = f"field {field!r} does not exist for key: {name}"
            raise NotFound(msg)
        return codec.value_of(_as_bytes(blob))

    def purge(self) -> None:
        """FLUSHDB."""
        with _transport("FLUSHDB"):
            self._redis.flushdb()
        self._log.debug("cache_purge")

    def close(self) -> None:
        """Close the connection pool once."""
        if self._closed:
            return
        self._closed = True
        with _transport("CLOSE"):
            self._redis.close()

    def dump(self) -> list[str]:
        """Return every key in the database, sorted."""
        with _transport("KEYS"):
            return sorted(_as_str(k) for k in self._redis.keys("*"))

    # --- internals ---

    def _closure(self, keys: tuple[KeyLike, ...]) -> list[str]:
        names = [resolve_key(k) for k in keys]
        return list(dict.fromkeys(k for name in names for k in self._resolver.resolve(name)))

"""Factory functions for creating cache backends from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from relevant_cache_core.interfaces.cache import RelevantCache

if TYPE_CHECKING:
    from relevant_cache_core.config.settings import Settings


def create_cache(settings: Settings, debug_writer: TextIO | None = None) -> RelevantCache:
    """Create a cache backend based on settings.

    Returns ``MemoryCache`` when ``settings.cache_backend == "memory"``,
    otherwise connects a ``RedisCache`` to ``settings.redis_url``.
    """
    if settings.cache_backend == "memory":
        from relevant_cache_infra.cache.memory_cache import MemoryCache

        return MemoryCache(debug_writer=debug_writer)

    from relevant_cache_infra.cache.redis_cache import RedisCache

    return RedisCache.connect(
        settings.redis_url,
        skip_tls_verify=settings.skip_tls_verify,
        scan_count=settings.scan_count,
        debug_writer=debug_writer,
    )

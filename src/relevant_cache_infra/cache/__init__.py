"""Storage backends implementing RelevantCache."""

from relevant_cache_infra.cache.factories import create_cache
from relevant_cache_infra.cache.memory_cache import MemoryCache
from relevant_cache_infra.cache.redis_cache import RedisCache

__all__ = [
    "MemoryCache",
    "RedisCache",
    "create_cache",
]

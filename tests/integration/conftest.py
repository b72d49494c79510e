"""Integration test fixtures for a real Redis on localhost."""

from __future__ import annotations

import socket
import time
from collections.abc import Generator

import pytest

from relevant_cache_infra.cache.redis_cache import RedisCache

TEST_REDIS_URL = "redis://localhost:6379/1"


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 10,
    delay: float = 1.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


_redis_up = _tcp_reachable("localhost", 6379, retries=3)

require_redis = pytest.mark.skipif(
    not _redis_up,
    reason="Redis not reachable on localhost:6379",
)


@pytest.fixture
def redis_cache() -> Generator[RedisCache, None, None]:
    """Function-scoped RedisCache on test DB 1, flushed before and after each test."""
    if not _redis_up:
        pytest.skip("Redis not available")

    cache = RedisCache.connect(TEST_REDIS_URL)
    cache.purge()
    yield cache
    cache.purge()
    cache.close()

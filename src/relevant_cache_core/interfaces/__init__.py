"""Public interface re-exports for relevant_cache_core."""

from relevant_cache_core.interfaces.cache import RelevantCache
from relevant_cache_core.resolver import RecordSource

__all__ = [
    "RecordSource",
    "RelevantCache",
]

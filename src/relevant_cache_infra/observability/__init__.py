"""Observability: structured logging and debug sinks.

Applications call ``configure_logging`` once at startup, before building
a cache, so library events share the process-wide renderer::

    from relevant_cache_core.config.settings import Settings
    from relevant_cache_infra.cache import create_cache
    from relevant_cache_infra.observability import configure_logging

    settings = Settings()
    configure_logging(settings)
    cache = create_cache(settings)

``make_debug_logger`` is used by the backends for their optional
``debug_writer`` sink and does not depend on that configuration.
"""

from relevant_cache_infra.observability.logging import (
    configure_logging,
    make_debug_logger,
)

__all__ = [
    "configure_logging",
    "make_debug_logger",
]

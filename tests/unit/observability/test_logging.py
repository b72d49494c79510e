"""Tests for observability/logging.py."""

from __future__ import annotations

import io
import logging

import pytest
import structlog

from relevant_cache_infra.observability.logging import (
    _resolve_level,
    configure_logging,
    make_debug_logger,
)


def _make_settings(**overrides: object) -> object:
    """Create a minimal mock settings object."""
    from types import SimpleNamespace

    defaults: dict[str, object] = {"log_format": "console", "log_level": "INFO"}
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


@pytest.fixture(autouse=True)
def _reset_logging() -> None:
    """Restore root logger handlers and structlog defaults after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield  # type: ignore[misc]
    root.handlers = original_handlers
    root.level = original_level
    structlog.reset_defaults()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configure_logging_console_mode(self) -> None:
        """Console mode configures without error."""
        configure_logging(_make_settings(log_format="console"))  # type: ignore[arg-type]
        assert structlog.get_logger() is not None

    def test_configure_logging_json_mode(self) -> None:
        """JSON mode produces JSON output."""
        configure_logging(_make_settings(log_format="json"))  # type: ignore[arg-type]

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.getLogger().handlers[0].formatter)
        log = logging.getLogger("test_json_mode")
        log.addHandler(handler)
        log.setLevel(logging.INFO)
        log.info("test_event")

        assert '"event": "test_event"' in stream.getvalue()

    def test_configure_logging_sets_level(self) -> None:
        """Log level is applied to root logger."""
        configure_logging(_make_settings(log_level="WARNING"))  # type: ignore[arg-type]
        assert logging.getLogger().level == logging.WARNING


@pytest.mark.unit
class TestMakeDebugLogger:
    """Tests for make_debug_logger."""

    def test_writes_to_sink(self) -> None:
        """Events, including debug ones, go straight to the writer."""
        sink = io.StringIO()
        log = make_debug_logger(sink, backend="memory")
        log.debug("cache_set", key="a")
        line = sink.getvalue()
        assert "event='cache_set'" in line
        assert "level='debug'" in line
        assert "backend='memory'" in line
        assert "key='a'" in line

    def test_without_sink_uses_structlog(self) -> None:
        """No sink means a regular structlog logger."""
        log = make_debug_logger(None, backend="redis")
        log.debug("ignored")


@pytest.mark.unit
class TestResolveLevel:
    """Tests for _resolve_level."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
            ("debug", logging.DEBUG),
            ("unknown", logging.INFO),
        ],
    )
    def test_resolve_level(self, name: str, expected: int) -> None:
        """Level names resolve to correct logging constants."""
        assert _resolve_level(name) == expected


@pytest.mark.unit
class TestStartupSequence:
    """configure_logging followed by create_cache, as an application starts up."""

    def test_configure_then_create_memory_cache(self) -> None:
        """Logging configured from real Settings coexists with a working cache."""
        from relevant_cache_core.models import Entry
        from relevant_cache_infra.cache import MemoryCache, create_cache
        from tests.mocks.mock_settings import make_real_settings

        settings = make_real_settings(cache_backend="memory", log_level="DEBUG")
        configure_logging(settings)
        assert logging.getLogger().level == logging.DEBUG

        cache = create_cache(settings)
        assert isinstance(cache, MemoryCache)
        cache.set(Entry(key="boot", value="1"))
        assert cache.get("boot") == b"1"
        cache.close()

"""Tests for structured logging."""

import io
import json
import logging

import pytest

from artistgraph.domain.exceptions import RemoteApiError
from artistgraph.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    log_operation,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers, put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="artistgraph.test",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        test_id = "test-123-abc"
        result = set_correlation_id(test_id)
        assert result == test_id
        assert get_correlation_id() == test_id

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_attaches_correlation_id(self):
        """Test the filter copies the context value onto the record."""
        set_correlation_id("corr-1")
        record = make_record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "corr-1"


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        logger = logging.getLogger("artistgraph.test")
        assert logger.getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        """Test calling configure twice leaves exactly one handler."""
        configure_logging(log_level="INFO", json_format=False)
        configure_logging(log_level="INFO", json_format=True)

        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_http_libraries_are_quietened(self):
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING


class TestFormatters:
    """Test the JSON and compact formatters."""

    def test_json_output_carries_correlation_id(self):
        """Test JSON lines include level, logger and correlation id."""
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(CorrelationIdFilter())
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
        logger = logging.getLogger("artistgraph.json_test")
        logger.addHandler(handler)
        logger.propagate = False
        try:
            set_correlation_id("corr-json")
            logger.warning("Fetch failed")
        finally:
            logger.removeHandler(handler)
            logger.propagate = True

        payload = json.loads(stream.getvalue())
        assert payload["message"] == "Fetch failed"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "artistgraph.json_test"
        assert payload["correlation_id"] == "corr-json"

    def test_compact_exception_chain(self):
        """Test the chain is printed root cause first, one header per exception."""
        try:
            try:
                raise ConnectionError("socket closed")
            except ConnectionError as e:
                raise RemoteApiError(502, "Bad gateway") from e
        except RemoteApiError as e:
            exc_info = (type(e), e, e.__traceback__)

        output = CompactExceptionFormatter().formatException(exc_info)

        headers = [line for line in output.splitlines() if line.startswith("╰─►")]
        assert headers == [
            "╰─► ConnectionError: socket closed",
            "╰─► RemoteApiError: Spotify API Error: Bad gateway (Status: 502)",
        ]

    def test_compact_without_exception(self):
        assert CompactExceptionFormatter().formatException((None, None, None)) == ""


class TestLogOperation:
    """Test the started/completed/failed operation logger."""

    async def test_success_logs_started_and_completed(self, caplog):
        logger = logging.getLogger("artistgraph.ops")
        with caplog.at_level(logging.INFO, logger="artistgraph.ops"):
            async with log_operation(logger, "artist_songs.fetch", artist_id="abc"):
                pass

        messages = [record.getMessage() for record in caplog.records]
        assert messages == ["artist_songs.fetch.started", "artist_songs.fetch.completed"]
        assert caplog.records[1].artist_id == "abc"
        assert caplog.records[1].duration_ms >= 0

    async def test_failure_logs_and_reraises(self, caplog):
        logger = logging.getLogger("artistgraph.ops")
        with caplog.at_level(logging.INFO, logger="artistgraph.ops"):
            with pytest.raises(RemoteApiError):
                async with log_operation(logger, "playlist.export"):
                    raise RemoteApiError(500)

        failed = caplog.records[-1]
        assert failed.getMessage() == "playlist.export.failed"
        assert failed.levelno == logging.WARNING
        assert failed.error_type == "RemoteApiError"

"""Tests for agent_readiness._shared.logging."""

from __future__ import annotations

import io
import json
import logging

import pytest

from agent_readiness._shared.logging import (
    CorrelationContext,
    JsonFormatter,
    LoggerAdapter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    with_fields,
)


def _json_logger(name: str) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, stream


class TestGetLogger:
    """Tests for get_logger."""

    def test_returns_logger_adapter(self) -> None:
        """get_logger returns a LoggerAdapter instance."""
        assert isinstance(get_logger(__name__), LoggerAdapter)

    def test_logger_has_null_handler(self) -> None:
        """A fresh library logger only carries a NullHandler."""
        logger = get_logger(f"{__name__}.null_handler")
        handlers = logger.logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_formats_structured_fields(self) -> None:
        """Records become one JSON object with the structured fields."""
        logger, stream = _json_logger(f"{__name__}.json")
        logger.info("Measured", extra={"operation": "measure", "status": "success", "value": 3})
        payload = json.loads(stream.getvalue().strip())
        assert payload["message"] == "Measured"
        assert payload["level"] == "INFO"
        assert payload["operation"] == "measure"
        assert payload["value"] == 3
        assert payload["ts"].endswith("Z")

    def test_includes_correlation_id_from_context(self) -> None:
        """The context correlation id is added when the record has none."""
        logger, stream = _json_logger(f"{__name__}.correlation")
        with CorrelationContext("run-42"):
            logger.info("inside")
        assert json.loads(stream.getvalue().strip())["correlation_id"] == "run-42"


class TestLoggerAdapter:
    """Tests for the structured adapter."""

    def test_injects_operation_and_status_defaults(self, caplog: pytest.LogCaptureFixture) -> None:
        """Missing operation and status are filled from the level."""
        adapter = get_logger(f"{__name__}.defaults")
        with caplog.at_level(logging.WARNING, logger=adapter.logger.name):
            adapter.warning("careful")
        record = caplog.records[-1]
        assert record.operation == "unknown"  # type: ignore[attr-defined]
        assert record.status == "warning"  # type: ignore[attr-defined]

    def test_with_fields_binds_values_beneath_call_extra(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Bound fields apply unless the call overrides them."""
        adapter = with_fields(get_logger(f"{__name__}.bound"), operation="measure", tool="mypy")
        with caplog.at_level(logging.INFO, logger=adapter.logger.name):
            adapter.info("first")
            adapter.info("second", extra={"tool": "ruff"})
        first, second = caplog.records[-2:]
        assert first.tool == "mypy"  # type: ignore[attr-defined]
        assert first.operation == "measure"  # type: ignore[attr-defined]
        assert second.tool == "ruff"  # type: ignore[attr-defined]


class TestCorrelationContext:
    """Tests for correlation id scoping."""

    def test_restores_previous_id(self) -> None:
        """Leaving the block restores the outer correlation id."""
        set_correlation_id("outer")
        try:
            with CorrelationContext("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"
        finally:
            set_correlation_id(None)

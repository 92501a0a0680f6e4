"""Structured logging helpers for readiness measurement.

Loggers returned by :func:`get_logger` inject ``operation``, ``status`` and the
context-propagated ``correlation_id`` into every record. Library modules never
configure handlers; applications call :func:`setup_logging` once at the
boundary to emit JSON lines on stdout.

Examples
--------
>>> from agent_readiness._shared.logging import get_logger, with_fields
>>> logger = get_logger(__name__)
>>> logger.info("Measurement started", extra={"operation": "measure", "status": "started"})
>>> adapter = with_fields(logger, operation="measure", language="python")
>>> adapter.info("Running mypy")
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from types import TracebackType

__all__ = [
    "CorrelationContext",
    "JsonFormatter",
    "LogValue",
    "LoggerAdapter",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "setup_logging",
    "with_fields",
]

type LogValue = Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

_STRUCTURED_FIELDS = ("correlation_id", "operation", "status", "duration_ms")

_RESERVED_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "ts",
    }
)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON documents.

    The payload always carries ``ts``, ``level``, ``name`` and ``message``;
    structured fields and any JSON-compatible ``extra`` values follow.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Return ``record`` encoded as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Record to encode.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, object] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value

        if "correlation_id" not in data:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                data["correlation_id"] = ctx_correlation_id

        for key, value in record.__dict__.items():
            if (
                key not in _RESERVED_ATTRIBUTES
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that injects structured context fields.

    Fields bound on the adapter are merged beneath per-call ``extra`` values,
    the correlation id is read from context when absent, and ``operation`` and
    ``status`` default to ``"unknown"`` and a level-derived value.
    """

    logger: logging.Logger

    def process(
        self, msg: object, kwargs: MutableMapping[str, Any]
    ) -> tuple[object, MutableMapping[str, Any]]:
        """Merge bound fields and the context correlation id into ``extra``.

        Parameters
        ----------
        msg : object
            Log message.
        kwargs : MutableMapping[str, Any]
            Keyword arguments of the logging call.

        Returns
        -------
        tuple[object, MutableMapping[str, Any]]
            Message and kwargs with a populated ``extra`` mapping.
        """
        extra = dict(kwargs.get("extra") or {})
        if self.extra:
            for key, value in self.extra.items():
                extra.setdefault(key, value)
        if "correlation_id" not in extra:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                extra["correlation_id"] = ctx_correlation_id
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log ``msg`` at ``level`` with structured fields injected."""
        if not self.isEnabledFor(level):
            return
        msg, kwargs = self.process(msg, kwargs)
        self._ensure_operation_and_status(kwargs["extra"], level)
        self.logger.log(level, msg, *args, **kwargs)

    @staticmethod
    def _ensure_operation_and_status(extra: dict[str, Any], level: int) -> None:
        if "operation" not in extra:
            extra["operation"] = "unknown"
        if "status" not in extra:
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    A :class:`logging.NullHandler` is attached when the logger has no handlers
    so library use never prints "no handler" warnings.

    Parameters
    ----------
    name : str
        Logger name (typically ``__name__``).

    Returns
    -------
    LoggerAdapter
        Adapter injecting structured context fields.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: LogValue) -> LoggerAdapter:
    """Return an adapter bound to ``fields``.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger to wrap (may already be an adapter).
    **fields : LogValue
        Structured fields to inject into all log entries.

    Returns
    -------
    LoggerAdapter
        Logger adapter with bound fields.
    """
    base_logger = logger.logger if isinstance(logger, LoggerAdapter) else logger
    return LoggerAdapter(base_logger, fields)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root logger to emit JSON lines on stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation id injected into subsequent log entries."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Return the current correlation id, or ``None`` when unset."""
    return _correlation_id.get()


class CorrelationContext:
    """Scope a correlation id and restore the previous one on exit.

    Parameters
    ----------
    correlation_id : str | None
        Correlation id to set for the duration of the block.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> with CorrelationContext("run-123"):
    ...     logger.info("Measuring")
    """

    def __init__(self, correlation_id: str | None) -> None:
        self.correlation_id = correlation_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _correlation_id.set(self.correlation_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None
        del exc_type, exc_val, exc_tb

"""Prometheus metrics and structured logs for analysis tool subprocesses.

Every subprocess the runner starts is wrapped in :func:`observe_tool_run`. The
observation is marked as a success (any exit status, since analysis tools
report findings through it) or as a failure with a :data:`FailureReason`; on
exit it updates :class:`ToolRunMetrics` and writes one log record.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import TYPE_CHECKING, Final, Literal

from agent_readiness._shared.logging import get_logger, with_fields
from agent_readiness._shared.prometheus import build_counter, build_histogram
from agent_readiness._shared.settings import get_runtime_settings

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from prometheus_client.registry import CollectorRegistry

    from agent_readiness._shared.logging import LoggerAdapter
    from agent_readiness._shared.prometheus import CounterLike, HistogramLike

__all__: Final[list[str]] = [
    "TOOL_RUN_METRICS",
    "FailureReason",
    "ToolRunMetrics",
    "ToolRunObservation",
    "observe_tool_run",
]

LOGGER = get_logger(__name__)

type FailureReason = Literal["timeout", "missing_executable", "spawn_error", "exception"]
type RunStatus = Literal["success", "error"]

# Coverage runs execute whole test suites, hence the long tail.
_DURATION_BUCKETS: Final = (0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0)


@dataclass(frozen=True, slots=True)
class ToolRunMetrics:
    """The three instruments describing tool runs."""

    runs: CounterLike
    failures: CounterLike
    duration: HistogramLike

    @classmethod
    def create(cls, registry: CollectorRegistry | None = None) -> ToolRunMetrics:
        """Register the instruments in ``registry`` (the default registry when omitted)."""
        return cls(
            runs=build_counter(
                "readiness_tool_runs_total",
                "Total analysis tool invocations",
                ["tool", "status"],
                registry=registry,
            ),
            failures=build_counter(
                "readiness_tool_failures_total",
                "Analysis tool invocations that did not complete cleanly, by reason",
                ["tool", "reason"],
                registry=registry,
            ),
            duration=build_histogram(
                "readiness_tool_duration_seconds",
                "Analysis tool invocation duration in seconds",
                ["tool", "status"],
                buckets=_DURATION_BUCKETS,
                registry=registry,
            ),
        )

    def record(
        self, tool: str, status: RunStatus, duration: float, reason: FailureReason | None
    ) -> None:
        """Count one run, its duration and, for failures, its reason."""
        self.runs.labels(tool=tool, status=status).inc()
        self.duration.labels(tool=tool, status=status).observe(duration)
        if reason is not None:
            self.failures.labels(tool=tool, reason=reason).inc()


TOOL_RUN_METRICS: Final = ToolRunMetrics.create()


@dataclass(slots=True)
class ToolRunObservation:
    """Outcome of one subprocess invocation, filled in by the runner."""

    command: Sequence[str]
    cwd: Path | None
    timeout: float | None
    metrics_enabled: bool = True
    metrics: ToolRunMetrics = field(default=TOOL_RUN_METRICS, repr=False)
    tool: str = field(init=False)
    status: RunStatus = field(default="success", init=False)
    failure_reason: FailureReason | None = field(default=None, init=False)
    returncode: int | None = field(default=None, init=False)
    timed_out: bool = field(default=False, init=False)
    started: float = field(default_factory=time.monotonic, init=False)

    def __post_init__(self) -> None:
        self.tool = PurePath(self.command[0]).name if self.command else "<unknown>"

    def success(self, returncode: int) -> None:
        """Mark the run as completed with ``returncode``, whatever its value."""
        self.status = "success"
        self.returncode = returncode
        self.failure_reason = None
        self.timed_out = False

    def failure(
        self, reason: FailureReason, *, returncode: int | None = None, timed_out: bool = False
    ) -> None:
        """Mark the run as unable to complete."""
        self.status = "error"
        self.failure_reason = reason
        self.returncode = returncode
        self.timed_out = timed_out

    def duration_seconds(self) -> float:
        """Seconds elapsed since the observation started."""
        return time.monotonic() - self.started

    def publish(self, logger: LoggerAdapter) -> None:
        """Update the metrics (when enabled) and log the outcome."""
        duration = self.duration_seconds()
        if self.metrics_enabled:
            self.metrics.record(self.tool, self.status, duration, self.failure_reason)
        extra: dict[str, object] = {
            "duration_ms": round(duration * 1000, 3),
            "status": self.status,
            "returncode": self.returncode,
            "timed_out": self.timed_out,
        }
        if self.status == "error":
            extra["reason"] = self.failure_reason
            logger.warning("Tool run failed", extra=extra)
        else:
            logger.info("Tool run completed", extra=extra)


@contextmanager
def observe_tool_run(
    command: Sequence[str],
    *,
    cwd: Path | None,
    timeout: float | None,
    metrics: ToolRunMetrics | None = None,
) -> Iterator[ToolRunObservation]:
    """Observe one subprocess invocation.

    Parameters
    ----------
    command : Sequence[str]
        Command being executed.
    cwd : Path | None
        Working directory of the command.
    timeout : float | None
        Effective timeout in seconds.
    metrics : ToolRunMetrics | None, optional
        Instruments to update; :data:`TOOL_RUN_METRICS` when omitted.

    Yields
    ------
    ToolRunObservation
        Observation the caller marks as success or failure.

    Raises
    ------
    Exception
        Anything raised inside the block propagates after being recorded
        with reason ``"exception"``.
    """
    observation = ToolRunObservation(
        command=command,
        cwd=cwd,
        timeout=timeout,
        metrics_enabled=get_runtime_settings().metrics_enabled,
        metrics=metrics if metrics is not None else TOOL_RUN_METRICS,
    )
    logger = with_fields(
        LOGGER,
        operation="tool_run",
        tool=observation.tool,
        command=list(command),
        cwd=str(cwd) if cwd else None,
        timeout_seconds=timeout,
    )
    try:
        yield observation
    except Exception:
        if observation.status == "success":
            observation.failure("exception")
        observation.publish(logger)
        raise
    observation.publish(logger)

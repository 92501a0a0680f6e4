"""Aggregate per-language measurements into one immutable report."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Literal

from agent_readiness._shared.logging import CorrelationContext, get_logger
from agent_readiness.metrics.coverage import measure_coverage
from agent_readiness.metrics.linter import measure_lint_errors
from agent_readiness.metrics.parsers import round_half_up
from agent_readiness.metrics.type_checker import measure_type_strictness

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner
    from agent_readiness.metrics.models import MetricResult
    from agent_readiness.types import DetectedLanguage

__all__ = [
    "METRIC_LABELS",
    "MetricsReport",
    "MetricsSummary",
    "ProgressCallback",
    "ProgressPhase",
    "build_report",
    "has_coverage_data",
    "run_all_metrics",
    "summarize",
]

LOGGER = get_logger(__name__)

type ProgressPhase = Literal["start", "done"]
type ProgressCallback = Callable[..., None]
"""Called as ``callback(label, "start")`` and ``callback(label, "done", result)``."""

METRIC_LABELS: Final[dict[str, str]] = {
    "type_strictness": "Type Strictness",
    "lint_errors": "Lint Errors",
    "test_coverage": "Test Coverage",
}


@dataclass(slots=True, frozen=True)
class MetricsSummary:
    """Totals over every usable per-language result."""

    total_type_errors: float
    total_lint_errors: float
    average_coverage: float


@dataclass(slots=True, frozen=True)
class MetricsReport:
    """Per-language results for the three metrics plus their summary.

    The result maps are read-only views keyed by language id.
    """

    languages: tuple[DetectedLanguage, ...]
    type_strictness: Mapping[str, MetricResult]
    lint_errors: Mapping[str, MetricResult]
    coverage: Mapping[str, MetricResult]
    summary: MetricsSummary


def summarize(
    type_strictness: Mapping[str, MetricResult],
    lint_errors: Mapping[str, MetricResult],
    coverage: Mapping[str, MetricResult],
) -> MetricsSummary:
    """Sum error counts and average coverage over results that succeeded.

    Sentinel and failed results are skipped; the average is rounded to one
    decimal place and is ``0`` when no coverage was measured.
    """
    total_type_errors = sum(result.value for result in type_strictness.values() if result.usable)
    total_lint_errors = sum(result.value for result in lint_errors.values() if result.usable)
    coverage_values = [result.value for result in coverage.values() if result.usable]
    average = (
        round_half_up(sum(coverage_values) / len(coverage_values), 1) if coverage_values else 0
    )
    return MetricsSummary(
        total_type_errors=total_type_errors,
        total_lint_errors=total_lint_errors,
        average_coverage=average,
    )


def build_report(
    languages: Sequence[DetectedLanguage],
    type_strictness: Mapping[str, MetricResult],
    lint_errors: Mapping[str, MetricResult],
    coverage: Mapping[str, MetricResult],
) -> MetricsReport:
    """Freeze per-language results into a :class:`MetricsReport`."""
    return MetricsReport(
        languages=tuple(languages),
        type_strictness=MappingProxyType(dict(type_strictness)),
        lint_errors=MappingProxyType(dict(lint_errors)),
        coverage=MappingProxyType(dict(coverage)),
        summary=summarize(type_strictness, lint_errors, coverage),
    )


def has_coverage_data(report: MetricsReport) -> bool:
    """Return ``True`` when at least one language produced a coverage figure."""
    return any(result.usable for result in report.coverage.values())


def run_all_metrics(
    directory: str | PathLike[str],
    languages: Sequence[DetectedLanguage],
    *,
    runner: ToolRunner | None = None,
    on_progress: ProgressCallback | None = None,
    correlation_id: str | None = None,
) -> MetricsReport:
    """Measure every metric for every language, one tool at a time.

    Languages are processed in order; for each one the type checker, the
    linter and the coverage run execute sequentially, so at most one tool
    process is alive at any moment.

    Parameters
    ----------
    directory : str | PathLike[str]
        Project root.
    languages : Sequence[DetectedLanguage]
        Languages supplied by the detection layer.
    runner : ToolRunner | None, optional
        Runner to use; defaults to the global process runner.
    on_progress : ProgressCallback | None, optional
        Receives ``(label, "start")`` before and ``(label, "done", result)``
        after each measurement.
    correlation_id : str | None, optional
        Id attached to every log entry of this run; generated when omitted.

    Returns
    -------
    MetricsReport
        Immutable report with per-language results and the summary.
    """
    measurers = (
        ("type_strictness", measure_type_strictness),
        ("lint_errors", measure_lint_errors),
        ("test_coverage", measure_coverage),
    )
    results: dict[str, dict[str, MetricResult]] = {metric: {} for metric, _ in measurers}

    with CorrelationContext(correlation_id or uuid.uuid4().hex):
        LOGGER.info(
            "Measuring project",
            extra={
                "operation": "run_all_metrics",
                "status": "started",
                "directory": str(directory),
                "languages": [detected.language for detected in languages],
            },
        )
        for detected in languages:
            for metric, measure in measurers:
                label = METRIC_LABELS[metric]
                if on_progress is not None:
                    on_progress(label, "start")
                result = measure(detected, directory, runner=runner)
                results[metric][detected.language] = result
                if on_progress is not None:
                    on_progress(label, "done", result)

        report = build_report(
            languages,
            results["type_strictness"],
            results["lint_errors"],
            results["test_coverage"],
        )
        LOGGER.info(
            "Measurement finished",
            extra={
                "operation": "run_all_metrics",
                "total_type_errors": report.summary.total_type_errors,
                "total_lint_errors": report.summary.total_lint_errors,
                "average_coverage": report.summary.average_coverage,
            },
        )
    return report

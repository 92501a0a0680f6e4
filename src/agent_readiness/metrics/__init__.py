"""Metric measurers for type strictness, lint errors and test coverage."""

from __future__ import annotations

from agent_readiness.metrics.coverage import measure_coverage, select_coverage_tool
from agent_readiness.metrics.linter import measure_lint_errors, select_linter
from agent_readiness.metrics.models import SENTINEL, MetricKind, MetricResult
from agent_readiness.metrics.report import (
    MetricsReport,
    MetricsSummary,
    build_report,
    has_coverage_data,
    run_all_metrics,
)
from agent_readiness.metrics.type_checker import measure_type_strictness, select_type_checker

__all__ = [
    "SENTINEL",
    "MetricKind",
    "MetricResult",
    "MetricsReport",
    "MetricsSummary",
    "build_report",
    "has_coverage_data",
    "measure_coverage",
    "measure_lint_errors",
    "measure_type_strictness",
    "run_all_metrics",
    "select_coverage_tool",
    "select_linter",
    "select_type_checker",
]

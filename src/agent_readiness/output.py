"""JSON rendering of a :class:`~agent_readiness.metrics.report.MetricsReport`.

The document mirrors the report with camelCase keys; raw tool output is left
out so the payload stays small and free of tool noise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import msgspec

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agent_readiness.metrics.models import MetricResult
    from agent_readiness.metrics.report import MetricsReport

__all__ = ["format_as_json"]


class LanguageDocument(msgspec.Struct, frozen=True, rename="camel"):
    """Detected language as rendered in the report."""

    language: str
    confidence: str
    markers: tuple[str, ...]


class MetricDocument(msgspec.Struct, frozen=True, rename="camel"):
    """One metric result without its raw diagnostic text."""

    metric: str
    tool: str
    value: float
    success: bool


class MetricsDocument(msgspec.Struct, frozen=True, rename="camel"):
    """Per-language results for the three metrics."""

    type_strictness: dict[str, MetricDocument]
    lint_errors: dict[str, MetricDocument]
    coverage: dict[str, MetricDocument]


class SummaryDocument(msgspec.Struct, frozen=True, rename="camel"):
    """Aggregate totals."""

    total_type_errors: float
    total_lint_errors: float
    average_coverage: float


class ReportDocument(msgspec.Struct, frozen=True, rename="camel"):
    """Top-level JSON report."""

    languages: tuple[LanguageDocument, ...]
    metrics: MetricsDocument
    summary: SummaryDocument


def _metrics(results: Mapping[str, MetricResult]) -> dict[str, MetricDocument]:
    return {
        language: MetricDocument(
            metric=result.metric, tool=result.tool, value=result.value, success=result.success
        )
        for language, result in results.items()
    }


def to_document(report: MetricsReport) -> ReportDocument:
    """Convert ``report`` into its serialisable document."""
    return ReportDocument(
        languages=tuple(
            LanguageDocument(
                language=detected.language,
                confidence=detected.confidence,
                markers=tuple(detected.markers),
            )
            for detected in report.languages
        ),
        metrics=MetricsDocument(
            type_strictness=_metrics(report.type_strictness),
            lint_errors=_metrics(report.lint_errors),
            coverage=_metrics(report.coverage),
        ),
        summary=SummaryDocument(
            total_type_errors=report.summary.total_type_errors,
            total_lint_errors=report.summary.total_lint_errors,
            average_coverage=report.summary.average_coverage,
        ),
    )


def format_as_json(report: MetricsReport) -> str:
    """Return ``report`` as 2-space indented camelCase JSON.

    Parameters
    ----------
    report : MetricsReport
        Report to render.

    Returns
    -------
    str
        JSON text.
    """
    encoded = msgspec.json.encode(to_document(report))
    return msgspec.json.format(encoded, indent=2).decode("utf-8")

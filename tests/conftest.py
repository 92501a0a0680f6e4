"""Shared pytest fixtures for agent readiness tests.

This module provides reusable fixtures for:
- Isolated runtime settings (cache reset around every test)
- Metrics report and score factories for scoring and recommendation tests
- A scripted runner installed as the global process runner
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Protocol

import pytest

from agent_readiness._shared.proc import set_process_runner
from agent_readiness._shared.settings import reset_runtime_settings
from agent_readiness.metrics.models import SENTINEL, MetricResult
from agent_readiness.metrics.report import build_report
from agent_readiness.scoring import ScoreBreakdown, ScoreResult
from agent_readiness.types import DetectedLanguage
from tests.helpers.runners import ScriptedRunner

if TYPE_CHECKING:
    from agent_readiness.metrics.report import MetricsReport
    from agent_readiness.scoring import Interpretation


class ReportFactory(Protocol):
    """Signature of the :func:`make_report` fixture."""

    def __call__(
        self,
        *,
        type_errors: float = ...,
        lint_errors: float = ...,
        coverage: float = ...,
        has_coverage: bool = ...,
        language: str = ...,
    ) -> MetricsReport: ...


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop cached settings and ``AGENT_READINESS_*`` overrides around each test."""
    for name in [key for key in os.environ if key.startswith("AGENT_READINESS_")]:
        monkeypatch.delenv(name, raising=False)
    reset_runtime_settings()
    yield
    reset_runtime_settings()


@pytest.fixture
def make_report() -> ReportFactory:
    """Return a factory building a one-language report from summary figures."""

    def factory(
        *,
        type_errors: float = 0,
        lint_errors: float = 0,
        coverage: float = 100,
        has_coverage: bool = True,
        language: str = "typescript",
    ) -> MetricsReport:
        coverage_result = (
            MetricResult(metric="test_coverage", tool="c8", value=coverage, success=True)
            if has_coverage
            else MetricResult(
                metric="test_coverage", tool="c8", value=SENTINEL, success=False, raw="c8 not found"
            )
        )
        return build_report(
            [
                DetectedLanguage(
                    language=language,  # type: ignore[arg-type]
                    markers=("package.json",),
                )
            ],
            {
                language: MetricResult(
                    metric="type_strictness", tool="tsc", value=type_errors, success=True
                )
            },
            {
                language: MetricResult(
                    metric="lint_errors", tool="eslint", value=lint_errors, success=True
                )
            },
            {language: coverage_result},
        )

    return factory


@pytest.fixture
def make_score() -> Callable[[int, Interpretation], ScoreResult]:
    """Return a factory building a score whose breakdown roughly matches ``score``."""

    def factory(score: int, interpretation: Interpretation) -> ScoreResult:
        type_points = min(30, round(score * 0.3))
        lint_points = min(30, round(score * 0.3))
        coverage_points = max(0, score - type_points - lint_points)
        return ScoreResult(
            score=score,
            breakdown=ScoreBreakdown(
                type_strictness=type_points, lint_errors=lint_points, coverage=coverage_points
            ),
            interpretation=interpretation,
        )

    return factory


@pytest.fixture
def scripted_runner() -> Iterator[ScriptedRunner]:
    """Install an empty :class:`ScriptedRunner` as the global process runner."""
    runner = ScriptedRunner(responses={})
    previous = set_process_runner(runner)
    try:
        yield runner
    finally:
        set_process_runner(previous)

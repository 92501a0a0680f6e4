"""Composite readiness score.

The score is the integer sum of three dimensions: type strictness (max 30),
lint errors (max 30) and test coverage (max 40). Error dimensions decay
logarithmically with the error count, so the first errors cost the most;
coverage is linear in the percentage. A project with no coverage figure at
all scores 0 on that dimension and therefore caps at 60.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Literal

from agent_readiness.metrics.parsers import round_half_up
from agent_readiness.metrics.report import has_coverage_data

if TYPE_CHECKING:
    from agent_readiness.metrics.report import MetricsReport

__all__ = [
    "COVERAGE_MAX",
    "LINT_ERRORS_MAX",
    "TYPE_STRICTNESS_MAX",
    "Interpretation",
    "ScoreBreakdown",
    "ScoreResult",
    "calculate_score",
    "coverage_points",
    "error_points",
    "interpret_score",
]

type Interpretation = Literal["excellent", "good", "needs-work", "poor"]

TYPE_STRICTNESS_MAX: Final = 30
LINT_ERRORS_MAX: Final = 30
COVERAGE_MAX: Final = 40

_BANDS: Final[tuple[tuple[int, Interpretation], ...]] = (
    (90, "excellent"),
    (70, "good"),
    (50, "needs-work"),
)


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
    """Points earned per dimension."""

    type_strictness: int
    lint_errors: int
    coverage: int

    @property
    def total(self) -> int:
        """Return the sum of the three dimensions."""
        return self.type_strictness + self.lint_errors + self.coverage


@dataclass(slots=True, frozen=True)
class ScoreResult:
    """Composite score with its breakdown and interpretation band."""

    score: int
    breakdown: ScoreBreakdown
    interpretation: Interpretation


def error_points(error_count: float, max_points: int) -> int:
    """Convert an error count into points with logarithmic decay.

    ``max_points / (1 + log10(1 + n))`` rounded half up; zero (or fewer)
    errors earn the full ``max_points``.

    Examples
    --------
    >>> error_points(0, 30)
    30
    >>> error_points(9, 30)
    15
    """
    if error_count <= 0:
        return max_points
    return int(round_half_up(max_points / (1 + math.log10(1 + error_count))))


def coverage_points(coverage: float, max_points: int) -> int:
    """Convert a coverage percentage into points, linearly.

    Values above 100 clamp to ``max_points`` and negative values earn nothing.
    """
    if coverage <= 0:
        return 0
    return int(round_half_up(min(coverage, 100) / 100 * max_points))


def interpret_score(score: int) -> Interpretation:
    """Return the band for ``score``; lower bounds are inclusive."""
    for lower_bound, label in _BANDS:
        if score >= lower_bound:
            return label
    return "poor"


def calculate_score(report: MetricsReport) -> ScoreResult:
    """Score ``report`` from its summary.

    Parameters
    ----------
    report : MetricsReport
        Aggregated measurements.

    Returns
    -------
    ScoreResult
        Score in ``[0, 100]`` whose breakdown sums exactly to the score.
    """
    summary = report.summary
    coverage = (
        coverage_points(summary.average_coverage, COVERAGE_MAX) if has_coverage_data(report) else 0
    )
    breakdown = ScoreBreakdown(
        type_strictness=error_points(summary.total_type_errors, TYPE_STRICTNESS_MAX),
        lint_errors=error_points(summary.total_lint_errors, LINT_ERRORS_MAX),
        coverage=coverage,
    )
    score = breakdown.total
    return ScoreResult(score=score, breakdown=breakdown, interpretation=interpret_score(score))

"""Tests for the composite readiness score."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from agent_readiness.scoring import (
    COVERAGE_MAX,
    LINT_ERRORS_MAX,
    TYPE_STRICTNESS_MAX,
    calculate_score,
    coverage_points,
    error_points,
    interpret_score,
)
from tests.helpers import assert_frozen_attribute

if TYPE_CHECKING:
    from tests.conftest import ReportFactory


class TestErrorPoints:
    """Tests for logarithmic error decay."""

    def test_zero_errors_earn_max(self) -> None:
        """No errors earn every point."""
        assert error_points(0, 30) == 30

    @pytest.mark.parametrize(("count", "expected"), [(1, 23), (9, 15), (99, 10), (999, 8)])
    def test_known_values(self, count: int, expected: int) -> None:
        """The decay follows ``max / (1 + log10(1 + n))``."""
        assert error_points(count, 30) == expected

    def test_monotonic_and_bounded(self) -> None:
        """More errors never earn more points, and points stay in range."""
        previous = error_points(0, 30)
        for count in range(1, 2000, 7):
            current = error_points(count, 30)
            assert 0 <= current <= previous
            previous = current


class TestCoveragePoints:
    """Tests for linear coverage points."""

    @pytest.mark.parametrize(
        ("coverage", "expected"), [(0, 0), (50, 20), (85, 34), (100, 40), (150, 40), (-5, 0)]
    )
    def test_linear_and_clamped(self, coverage: float, expected: int) -> None:
        """Points scale linearly and clamp at the maximum."""
        assert coverage_points(coverage, 40) == expected

    def test_half_point_rounds_up(self) -> None:
        """Ties round up (1.25% of 40 is 0.5 points)."""
        assert coverage_points(1.25, 40) == 1


class TestInterpretScore:
    """Tests for interpretation bands."""

    @pytest.mark.parametrize(
        ("score", "band"),
        [
            (100, "excellent"),
            (90, "excellent"),
            (89, "good"),
            (70, "good"),
            (69, "needs-work"),
            (50, "needs-work"),
            (49, "poor"),
            (0, "poor"),
        ],
    )
    def test_band_boundaries(self, score: int, band: str) -> None:
        """Lower bounds are inclusive."""
        assert interpret_score(score) == band

    def test_bands_partition_range(self) -> None:
        """Every score from 0 to 100 maps to exactly one band."""
        bands = {interpret_score(score) for score in range(101)}
        assert bands == {"excellent", "good", "needs-work", "poor"}


class TestCalculateScore:
    """Scenario tests for calculate_score."""

    def test_perfect_project(self, make_report: ReportFactory) -> None:
        """0 type errors, 0 lint errors and 100% coverage score 100."""
        result = calculate_score(make_report(coverage=100))
        assert result.score == 100
        assert (
            result.breakdown.type_strictness,
            result.breakdown.lint_errors,
            result.breakdown.coverage,
        ) == (TYPE_STRICTNESS_MAX, LINT_ERRORS_MAX, COVERAGE_MAX)
        assert result.interpretation == "excellent"

    def test_good_project(self, make_report: ReportFactory) -> None:
        """Two lint errors and 85% coverage land in the good band."""
        result = calculate_score(make_report(lint_errors=2, coverage=85))
        assert result.breakdown.type_strictness == 30
        assert 15 < result.breakdown.lint_errors < 30
        assert 80 <= result.score <= 90
        assert result.interpretation == "good"

    def test_no_coverage_data_caps_at_sixty(self, make_report: ReportFactory) -> None:
        """Missing coverage earns no coverage points."""
        result = calculate_score(make_report(has_coverage=False))
        assert result.score == 60
        assert result.breakdown.coverage == 0
        assert result.interpretation == "needs-work"

    def test_breakdown_sums_to_score(self, make_report: ReportFactory) -> None:
        """The breakdown always adds up to the score."""
        for type_errors, lint_errors, coverage in [(0, 0, 0), (3, 40, 55.5), (500, 1, 99.9)]:
            result = calculate_score(
                make_report(type_errors=type_errors, lint_errors=lint_errors, coverage=coverage)
            )
            assert result.score == result.breakdown.total
            assert 0 <= result.score <= 100

    def test_result_is_frozen(self, make_report: ReportFactory) -> None:
        """Scores are immutable."""
        assert_frozen_attribute(calculate_score(make_report()), "score", 0)

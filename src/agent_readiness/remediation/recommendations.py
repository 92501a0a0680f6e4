"""Tier-based remediation advice derived from a score and its report.

The interpretation band picks the strategy. Each strategy only speaks about
dimensions that still have room to improve, so a clean dimension never gets a
"fix 0 errors" entry. A report without any coverage figure is treated as
"coverage tooling missing", which is a different problem from low coverage.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Literal

from agent_readiness.metrics.registry import (
    ANDROID_COVERAGE_PROFILE,
    COVERAGE_PROFILES,
    GRADLE_JVM_COVERAGE_PROFILE,
    JEST_COVERAGE_PROFILE,
    TYPE_CHECK_PROFILES,
    VITEST_COVERAGE_PROFILE,
    ToolProfile,
)
from agent_readiness.metrics.report import has_coverage_data
from agent_readiness.remediation.fixer import fix_command

if TYPE_CHECKING:
    from agent_readiness.metrics.models import MetricResult
    from agent_readiness.metrics.report import MetricsReport
    from agent_readiness.scoring import Interpretation, ScoreResult

__all__ = [
    "MANY_ERRORS_THRESHOLD",
    "Recommendation",
    "RecommendationCategory",
    "RecommendationImpact",
    "RecommendationTier",
    "generate_recommendations",
]

type RecommendationTier = Literal["P0", "P1", "P2", "P3"]
type RecommendationCategory = Literal["type-strictness", "lint-errors", "test-coverage", "general"]
type RecommendationImpact = Literal["high", "medium", "low"]

MANY_ERRORS_THRESHOLD: Final = 50

# Profiles chosen per project instead of the per-language default.
_COVERAGE_VARIANTS: Final[tuple[ToolProfile, ...]] = (
    VITEST_COVERAGE_PROFILE,
    JEST_COVERAGE_PROFILE,
    GRADLE_JVM_COVERAGE_PROFILE,
    ANDROID_COVERAGE_PROFILE,
)

_TIER_ORDER: Final[Mapping[str, int]] = {"P0": 0, "P1": 1, "P2": 2, "P3": 3}
_IMPACT_ORDER: Final[Mapping[str, int]] = {"high": 0, "medium": 1, "low": 2}


@dataclass(slots=True, frozen=True)
class Recommendation:
    """One actionable item.

    Attributes
    ----------
    tier : RecommendationTier
        Priority, ``P0`` first.
    category : RecommendationCategory
        Dimension the item addresses.
    message : str
        Human-readable advice.
    impact : RecommendationImpact
        Expected effect on the score.
    tool : str | None
        Command that helps act on the advice, when one applies.
    """

    tier: RecommendationTier
    category: RecommendationCategory
    message: str
    impact: RecommendationImpact
    tool: str | None = None


@dataclass(slots=True, frozen=True)
class _Context:
    type_errors: int
    lint_errors: int
    coverage: float
    has_coverage: bool
    type_tool: str | None
    lint_tool: str | None
    coverage_tool: str | None


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _join_commands(commands: Iterable[str | None]) -> str | None:
    unique = list(dict.fromkeys(command for command in commands if command))
    return "; ".join(unique) if unique else None


def _hint(
    results: Mapping[str, MetricResult],
    lookup: Callable[[str], str | None],
    predicate: Callable[[MetricResult], bool],
) -> str | None:
    return _join_commands(
        lookup(language) for language, result in results.items() if predicate(result)
    )


def _profile_command(profiles: Mapping[str, object]) -> Callable[[str], str | None]:
    def lookup(language: str) -> str | None:
        profile = profiles.get(language)
        command = getattr(profile, "command", None)
        return " ".join(command) if command else None

    return lookup


def _measured_command(
    results: Mapping[str, MetricResult],
    defaults: Mapping[str, ToolProfile],
    variants: tuple[ToolProfile, ...],
) -> Callable[[str], str | None]:
    """Return a lookup giving the command of the tool that produced each result."""

    def lookup(language: str) -> str | None:
        default = defaults.get(language)
        used = results[language].tool
        for profile in (default, *variants):
            if profile is not None and profile.tool == used:
                return " ".join(profile.command)
        return " ".join(default.command) if default is not None else None

    return lookup


def _has_errors(result: MetricResult) -> bool:
    return result.usable and result.value > 0


def _context(report: MetricsReport) -> _Context:
    summary = report.summary
    return _Context(
        type_errors=int(summary.total_type_errors),
        lint_errors=int(summary.total_lint_errors),
        coverage=summary.average_coverage,
        has_coverage=has_coverage_data(report),
        type_tool=_hint(report.type_strictness, _profile_command(TYPE_CHECK_PROFILES), _has_errors),
        lint_tool=_hint(report.lint_errors, fix_command, _has_errors),
        coverage_tool=_hint(
            report.coverage,
            _measured_command(report.coverage, COVERAGE_PROFILES, _COVERAGE_VARIANTS),
            lambda _result: True,
        ),
    )


def _coverage_setup(
    ctx: _Context, tier: RecommendationTier, impact: RecommendationImpact
) -> Recommendation:
    return Recommendation(
        tier=tier,
        category="test-coverage",
        message=(
            "Set up coverage tooling so test coverage can be measured; "
            "no coverage data was found"
        ),
        impact=impact,
        tool=ctx.coverage_tool,
    )


def _poor(ctx: _Context) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    if ctx.type_errors > 0:
        if ctx.type_errors >= MANY_ERRORS_THRESHOLD:
            message = (
                f"Establish a type-checking foundation: enable the type checker in CI and "
                f"burn down the {_plural(ctx.type_errors, 'type error')} module by module"
            )
        else:
            message = f"Fix {_plural(ctx.type_errors, 'type error')} to build a typed foundation"
        recommendations.append(
            Recommendation("P0", "type-strictness", message, "high", ctx.type_tool)
        )
    if ctx.lint_errors > 0:
        if ctx.lint_errors >= MANY_ERRORS_THRESHOLD:
            message = (
                f"Establish a linting foundation: run the auto-fixer first, then work "
                f"through the {_plural(ctx.lint_errors, 'lint error')}"
            )
        else:
            message = f"Fix {_plural(ctx.lint_errors, 'lint error')}"
        recommendations.append(Recommendation("P1", "lint-errors", message, "high", ctx.lint_tool))
    if not ctx.has_coverage:
        recommendations.append(_coverage_setup(ctx, "P3", "low"))
    elif ctx.coverage < 100:
        recommendations.append(
            Recommendation(
                "P3",
                "test-coverage",
                f"Increase test coverage from {ctx.coverage}% once type and lint errors "
                "are under control",
                "low",
                ctx.coverage_tool,
            )
        )
    return recommendations


def _needs_work(ctx: _Context) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    if ctx.type_errors > 0:
        recommendations.append(
            Recommendation(
                "P0",
                "type-strictness",
                f"Fix {_plural(ctx.type_errors, 'type error')}; type errors cost the most points",
                "high",
                ctx.type_tool,
            )
        )
    if ctx.lint_errors > 0:
        recommendations.append(
            Recommendation(
                "P1",
                "lint-errors",
                f"Fix {_plural(ctx.lint_errors, 'lint error')}",
                "high",
                ctx.lint_tool,
            )
        )
    if not ctx.has_coverage:
        recommendations.append(_coverage_setup(ctx, "P2", "high"))
    elif ctx.coverage < 100:
        recommendations.append(
            Recommendation(
                "P2",
                "test-coverage",
                f"Increase test coverage from {ctx.coverage}% toward at least 80%",
                "high" if ctx.coverage < 50 else "medium",
                ctx.coverage_tool,
            )
        )
    return recommendations


def _good(ctx: _Context) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    if ctx.type_errors > 0:
        recommendations.append(
            Recommendation(
                "P1",
                "type-strictness",
                f"Fix the remaining {_plural(ctx.type_errors, 'type error')}",
                "medium",
                ctx.type_tool,
            )
        )
    if ctx.lint_errors > 0:
        recommendations.append(
            Recommendation(
                "P1",
                "lint-errors",
                f"Fix the remaining {_plural(ctx.lint_errors, 'lint error')}",
                "medium",
                ctx.lint_tool,
            )
        )
    if not ctx.has_coverage:
        recommendations.append(_coverage_setup(ctx, "P2", "medium"))
    elif ctx.coverage < 80:
        recommendations.append(
            Recommendation(
                "P2",
                "test-coverage",
                f"Increase test coverage from {ctx.coverage}% to at least 80%",
                "medium",
                ctx.coverage_tool,
            )
        )
    elif ctx.coverage < 100:
        recommendations.append(
            Recommendation(
                "P3",
                "test-coverage",
                f"Cover the remaining untested paths ({ctx.coverage}% covered)",
                "low",
                ctx.coverage_tool,
            )
        )
    if not recommendations:
        recommendations.append(
            Recommendation(
                "P2",
                "general",
                "Good shape overall; keep checks in CI to hold this score",
                "medium",
            )
        )
    return recommendations


def _excellent(ctx: _Context) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    if ctx.type_errors > 0:
        recommendations.append(
            Recommendation(
                "P2",
                "type-strictness",
                f"Fix the last {_plural(ctx.type_errors, 'type error')}",
                "low",
                ctx.type_tool,
            )
        )
    if ctx.lint_errors > 0:
        recommendations.append(
            Recommendation(
                "P2",
                "lint-errors",
                f"Fix the last {_plural(ctx.lint_errors, 'lint error')}",
                "low",
                ctx.lint_tool,
            )
        )
    if not ctx.has_coverage:
        recommendations.append(_coverage_setup(ctx, "P2", "low"))
    elif ctx.coverage < 100:
        recommendations.append(
            Recommendation(
                "P3",
                "test-coverage",
                f"Consider covering the remaining paths ({ctx.coverage}% covered)",
                "low",
                ctx.coverage_tool,
            )
        )
    recommendations.append(
        Recommendation(
            "P3",
            "general",
            "Excellent agent readiness; enable the score ratchet to maintain it",
            "low",
        )
    )
    recommendations.append(
        Recommendation(
            "P3",
            "general",
            "Consider advanced practices such as property-based tests or mutation testing",
            "low",
        )
    )
    return recommendations


_STRATEGIES: Final[Mapping[Interpretation, Callable[[_Context], list[Recommendation]]]] = {
    "poor": _poor,
    "needs-work": _needs_work,
    "good": _good,
    "excellent": _excellent,
}


def generate_recommendations(score: ScoreResult, report: MetricsReport) -> list[Recommendation]:
    """Return prioritized recommendations for ``score`` and ``report``.

    Parameters
    ----------
    score : ScoreResult
        Score whose interpretation band selects the strategy.
    report : MetricsReport
        Measurements supplying the error counts, coverage and tool hints.

    Returns
    -------
    list[Recommendation]
        Never empty; stably sorted by tier, then impact.
    """
    ctx = _context(report)
    recommendations = _STRATEGIES[score.interpretation](ctx)
    if not recommendations:
        recommendations.append(
            Recommendation(
                "P3",
                "general",
                "No blocking issues found; keep type checking, linting and tests in CI",
                "low",
            )
        )
    return sorted(
        recommendations,
        key=lambda item: (_TIER_ORDER[item.tier], _IMPACT_ORDER[item.impact]),
    )

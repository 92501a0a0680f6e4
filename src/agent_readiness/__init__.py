"""Agent readiness: measure, score and ratchet code-quality signals.

The pipeline runs external type checkers, linters and coverage tools per
language, folds their output into a :class:`~agent_readiness.metrics.MetricsReport`,
scores it on a 0-100 scale and turns the score into prioritized advice.
"""

from __future__ import annotations

from agent_readiness.metrics import MetricResult, MetricsReport, run_all_metrics
from agent_readiness.output import format_as_json
from agent_readiness.remediation import (
    RatchetStore,
    Recommendation,
    check_ratchet_regression,
    generate_recommendations,
    load_ratchet_score,
    run_fix,
    save_ratchet_score,
)
from agent_readiness.scoring import ScoreBreakdown, ScoreResult, calculate_score
from agent_readiness.types import DetectedLanguage

__all__ = [
    "DetectedLanguage",
    "MetricResult",
    "MetricsReport",
    "RatchetStore",
    "Recommendation",
    "ScoreBreakdown",
    "ScoreResult",
    "calculate_score",
    "check_ratchet_regression",
    "format_as_json",
    "generate_recommendations",
    "load_ratchet_score",
    "run_all_metrics",
    "run_fix",
    "save_ratchet_score",
]

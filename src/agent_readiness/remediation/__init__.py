"""Remediation: score ratchet, recommendations and auto-fix."""

from __future__ import annotations

from agent_readiness.remediation.fixer import FIX_TOOLS, FixResult, FixTool, fix_command, run_fix
from agent_readiness.remediation.ratchet import (
    RatchetBreakdown,
    RatchetResult,
    RatchetState,
    RatchetStore,
    check_ratchet_regression,
    load_ratchet_score,
    save_ratchet_score,
)
from agent_readiness.remediation.recommendations import (
    MANY_ERRORS_THRESHOLD,
    Recommendation,
    generate_recommendations,
)

__all__ = [
    "FIX_TOOLS",
    "MANY_ERRORS_THRESHOLD",
    "FixResult",
    "FixTool",
    "RatchetBreakdown",
    "RatchetResult",
    "RatchetState",
    "RatchetStore",
    "Recommendation",
    "check_ratchet_regression",
    "fix_command",
    "generate_recommendations",
    "load_ratchet_score",
    "run_fix",
    "save_ratchet_score",
]

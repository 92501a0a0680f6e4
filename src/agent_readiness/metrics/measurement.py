"""Shared run-and-interpret steps used by every metric measurer.

A measurement runs one :class:`~agent_readiness.metrics.registry.ToolProfile`
through a :class:`~agent_readiness._shared.process.ToolRunner` and folds the
outcome into a :class:`~agent_readiness.metrics.models.MetricResult`. The
checks run in a fixed order: timeout, missing executable, unparseable output.
Nothing raises past this module.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from agent_readiness._shared.logging import get_logger, with_fields
from agent_readiness._shared.proc import get_process_runner
from agent_readiness._shared.process import EXIT_NOT_FOUND
from agent_readiness._shared.settings import get_runtime_settings
from agent_readiness.metrics.models import SENTINEL, MetricResult
from agent_readiness.metrics.parsers import parse_output

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner, ToolRunResult
    from agent_readiness.metrics.models import MetricKind
    from agent_readiness.metrics.registry import ToolProfile

__all__ = [
    "execute_profile",
    "interpret_run",
    "log_result",
    "resolve_timeout",
    "unsupported_language",
]

LOGGER = get_logger(__name__)

_UNKNOWN_TOOL: Final = "unknown"


def resolve_timeout(profile: ToolProfile, timeout: float | None) -> float:
    """Return ``timeout`` or the profile's configured timeout when ``None``."""
    if timeout is not None:
        return timeout
    settings = get_runtime_settings()
    return float(getattr(settings, profile.timeout_setting))


def execute_profile(
    profile: ToolProfile,
    directory: str | PathLike[str],
    *,
    runner: ToolRunner | None,
    timeout: float | None,
) -> ToolRunResult:
    """Run ``profile.command`` inside ``directory``."""
    active_runner = runner if runner is not None else get_process_runner()
    return active_runner.run(
        profile.command,
        cwd=Path(directory),
        timeout=resolve_timeout(profile, timeout),
    )


def interpret_run(
    metric: MetricKind,
    profile: ToolProfile,
    run: ToolRunResult,
    *,
    timeout_message: str,
    value: float | None = None,
    raw_limit: int | None = None,
) -> MetricResult:
    """Fold a finished run into a :class:`MetricResult`.

    Parameters
    ----------
    metric : MetricKind
        Metric being measured.
    profile : ToolProfile
        Profile that produced ``run``.
    run : ToolRunResult
        Outcome reported by the runner.
    timeout_message : str
        Diagnostic text used when the run timed out.
    value : float | None, optional
        Figure already extracted by the caller (from a report file, for
        instance). When ``None`` the profile's output family parses ``run``.
    raw_limit : int | None, optional
        Maximum number of characters of output kept on a successful result.

    Returns
    -------
    MetricResult
        Successful result, or a sentinel result with diagnostic ``raw`` text.
    """
    if run.timed_out:
        return MetricResult.failed(metric, profile.tool, timeout_message)
    if run.returncode == EXIT_NOT_FOUND:
        return MetricResult.failed(metric, profile.tool, run.stderr or f"{profile.tool} not found")

    if value is None:
        value = parse_output(
            profile.family, run.stdout, run.stderr, run.returncode, profile.options
        )
    if value == SENTINEL:
        return MetricResult.failed(metric, profile.tool, run.stdout or run.stderr)

    raw = run.stdout
    if raw_limit is not None:
        raw = raw[:raw_limit]
    return MetricResult(metric=metric, tool=profile.tool, value=value, success=True, raw=raw)


def unsupported_language(metric: MetricKind, language: str) -> MetricResult:
    """Return the sentinel result reported for a language with no configured tool."""
    return MetricResult.failed(
        metric, _UNKNOWN_TOOL, f"No {metric} tool configured for '{language}'"
    )


def log_result(language: str, result: MetricResult) -> MetricResult:
    """Emit one structured log entry for ``result`` and return it unchanged."""
    logger = with_fields(
        LOGGER,
        operation="measure",
        metric=result.metric,
        tool=result.tool,
        language=language,
    )
    if result.success:
        logger.info("Metric measured", extra={"value": result.value})
    else:
        logger.warning(
            "Metric unavailable",
            extra={"status": "unavailable", "detail": (result.raw or "")[:200]},
        )
    return result

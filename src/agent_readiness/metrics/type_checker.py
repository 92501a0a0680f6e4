"""Type strictness measurement: count static type-checker errors per language."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from agent_readiness.metrics.measurement import (
    execute_profile,
    interpret_run,
    log_result,
    unsupported_language,
)
from agent_readiness.metrics.models import MetricResult
from agent_readiness.metrics.registry import TYPE_CHECK_PROFILES, UNTYPED_LANGUAGES
from agent_readiness.types import language_of

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner
    from agent_readiness.metrics.registry import ToolProfile
    from agent_readiness.types import DetectedLanguage

__all__ = ["NOT_APPLICABLE_TOOL", "measure_type_strictness", "select_type_checker"]

NOT_APPLICABLE_TOOL: Final = "n/a"


def select_type_checker(language: str) -> ToolProfile | None:
    """Return the type-checker profile for ``language``.

    Returns ``None`` for dynamically typed languages and for unknown ids.
    """
    return TYPE_CHECK_PROFILES.get(language)


def measure_type_strictness(
    language: str | DetectedLanguage,
    directory: str | PathLike[str],
    *,
    runner: ToolRunner | None = None,
    timeout: float | None = None,
) -> MetricResult:
    """Count type-checker errors for ``language`` in ``directory``.

    Dynamically typed languages get a synthetic clean result labelled
    ``n/a`` and no tool is run.

    Parameters
    ----------
    language : str | DetectedLanguage
        Language id or detection record.
    directory : str | PathLike[str]
        Project root the checker runs in.
    runner : ToolRunner | None, optional
        Runner to use; defaults to the global process runner.
    timeout : float | None, optional
        Override for ``type_check_timeout_seconds``.

    Returns
    -------
    MetricResult
        Error count, or the sentinel when the checker is missing, timed out
        or produced unreadable output.
    """
    language_id = language_of(language)
    if language_id in UNTYPED_LANGUAGES:
        return log_result(
            language_id,
            MetricResult(metric="type_strictness", tool=NOT_APPLICABLE_TOOL, value=0, success=True),
        )

    profile = select_type_checker(language_id)
    if profile is None:
        return log_result(language_id, unsupported_language("type_strictness", language_id))

    run = execute_profile(profile, directory, runner=runner, timeout=timeout)
    result = interpret_run(
        "type_strictness",
        profile,
        run,
        timeout_message=f"{profile.tool} timed out",
    )
    return log_result(language_id, result)

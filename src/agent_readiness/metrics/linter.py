"""Lint error measurement: count linter errors per language."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agent_readiness.metrics.measurement import (
    execute_profile,
    interpret_run,
    log_result,
    unsupported_language,
)
from agent_readiness.metrics.registry import GRADLE_LINT_PROFILE, LINT_PROFILES
from agent_readiness.types import DetectedLanguage, language_of

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner
    from agent_readiness.metrics.models import MetricResult
    from agent_readiness.metrics.registry import ToolProfile

__all__ = ["measure_lint_errors", "select_linter"]

_JVM_LANGUAGES = frozenset({"java", "kotlin"})


def select_linter(language: str | DetectedLanguage) -> ToolProfile | None:
    """Return the linter profile for ``language``.

    Java and Kotlin projects built with Gradle use Android Lint through the
    Gradle wrapper; every other language uses its registry entry.
    """
    language_id = language_of(language)
    if (
        isinstance(language, DetectedLanguage)
        and language.build_system == "gradle"
        and language_id in _JVM_LANGUAGES
    ):
        return GRADLE_LINT_PROFILE
    return LINT_PROFILES.get(language_id)


def measure_lint_errors(
    language: str | DetectedLanguage,
    directory: str | PathLike[str],
    *,
    runner: ToolRunner | None = None,
    timeout: float | None = None,
) -> MetricResult:
    """Count lint errors (warnings excluded) for ``language`` in ``directory``.

    Parameters
    ----------
    language : str | DetectedLanguage
        Language id or detection record; the build system picks Android Lint
        for Gradle JVM projects.
    directory : str | PathLike[str]
        Project root the linter runs in.
    runner : ToolRunner | None, optional
        Runner to use; defaults to the global process runner.
    timeout : float | None, optional
        Override for the profile's configured timeout.

    Returns
    -------
    MetricResult
        Error count, or the sentinel when the linter is missing, timed out or
        emitted a report that could not be decoded.
    """
    language_id = language_of(language)
    profile = select_linter(language)
    if profile is None:
        return log_result(language_id, unsupported_language("lint_errors", language_id))

    run = execute_profile(profile, directory, runner=runner, timeout=timeout)
    timeout_message = (
        "Android Lint timed out" if profile is GRADLE_LINT_PROFILE else "Linter timed out"
    )
    return log_result(
        language_id,
        interpret_run("lint_errors", profile, run, timeout_message=timeout_message),
    )

"""Test coverage measurement: line coverage percentage per language.

Coverage runs the whole test suite, so it uses the longest timeout. The
JavaScript runner is picked from the project's vitest config or
``package.json`` dependencies, and Gradle JVM projects read the JaCoCo XML
report rather than console output.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

import msgspec

from agent_readiness._shared.logging import get_logger
from agent_readiness._shared.settings import get_runtime_settings
from agent_readiness.metrics.measurement import (
    execute_profile,
    interpret_run,
    log_result,
    unsupported_language,
)
from agent_readiness.metrics.models import MetricResult
from agent_readiness.metrics.parsers import parse_jacoco_report
from agent_readiness.metrics.registry import (
    ANDROID_COVERAGE_PROFILE,
    COVERAGE_PROFILES,
    GRADLE_COVERAGE_PROFILE,
    GRADLE_JVM_COVERAGE_PROFILE,
    JACOCO_REPORT_PATHS,
    JEST_COVERAGE_PROFILE,
    VITEST_CONFIG_FILES,
    VITEST_COVERAGE_PROFILE,
)
from agent_readiness.types import DetectedLanguage, language_of

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner, ToolRunResult
    from agent_readiness.metrics.registry import ToolProfile

__all__ = [
    "DEVICE_PRECONDITION_MESSAGE",
    "find_jacoco_coverage",
    "measure_coverage",
    "select_coverage_tool",
]

LOGGER = get_logger(__name__)

DEVICE_PRECONDITION_MESSAGE: Final = (
    "No connected Android device/emulator for instrumented tests. "
    "Use JVM tests (src/test/) instead."
)

_DEVICE_FAILURE_MARKERS: Final = ("No connected devices", "DeviceException")
_JS_LANGUAGES = frozenset({"typescript", "javascript"})
_JVM_LANGUAGES = frozenset({"java", "kotlin"})


class _PackageManifest(msgspec.Struct):
    dependencies: dict[str, str] = {}
    devDependencies: dict[str, str] = {}  # noqa: N815

    def declares(self, name: str) -> bool:
        return name in self.dependencies or name in self.devDependencies


def _read_manifest(directory: Path) -> _PackageManifest | None:
    try:
        content = (directory / "package.json").read_bytes()
        return msgspec.json.decode(content, type=_PackageManifest)
    except (OSError, msgspec.DecodeError, msgspec.ValidationError):
        # A missing or malformed manifest leaves the default runner in place.
        return None


def _select_js_tool(directory: Path) -> ToolProfile:
    if any((directory / name).exists() for name in VITEST_CONFIG_FILES):
        return VITEST_COVERAGE_PROFILE
    manifest = _read_manifest(directory)
    if manifest is not None:
        if manifest.declares("vitest"):
            return VITEST_COVERAGE_PROFILE
        if manifest.declares("jest"):
            return JEST_COVERAGE_PROFILE
    return COVERAGE_PROFILES["typescript"]


def _select_gradle_tool(directory: Path, detected: DetectedLanguage) -> ToolProfile:
    if (directory / "src" / "test").exists():
        return GRADLE_JVM_COVERAGE_PROFILE
    if detected.is_android:
        return ANDROID_COVERAGE_PROFILE
    return GRADLE_COVERAGE_PROFILE


def _is_gradle_jvm(language: str | DetectedLanguage) -> bool:
    return (
        isinstance(language, DetectedLanguage)
        and language.build_system == "gradle"
        and language.language in _JVM_LANGUAGES
    )


def select_coverage_tool(
    language: str | DetectedLanguage, directory: str | PathLike[str]
) -> ToolProfile | None:
    """Return the coverage profile for ``language`` in ``directory``.

    JavaScript and TypeScript prefer vitest (config file or dependency), then
    jest, then c8. Gradle Java and Kotlin projects prefer JVM unit tests when
    ``src/test`` exists, then Android instrumented tests.
    """
    language_id = language_of(language)
    root = Path(directory)
    if language_id in _JS_LANGUAGES:
        return _select_js_tool(root)
    if isinstance(language, DetectedLanguage) and _is_gradle_jvm(language):
        return _select_gradle_tool(root, language)
    return COVERAGE_PROFILES.get(language_id)


def find_jacoco_coverage(directory: str | PathLike[str]) -> float:
    """Return the first positive line coverage found in the known JaCoCo report paths.

    Returns ``0`` when no report exists or every report is empty.
    """
    root = Path(directory)
    for parts in JACOCO_REPORT_PATHS:
        try:
            xml = root.joinpath(*parts).read_text(encoding="utf-8")
        except OSError:
            continue
        coverage = parse_jacoco_report(xml)
        if coverage > 0:
            return coverage
    return 0


def _device_missing(run: ToolRunResult) -> bool:
    return any(marker in run.stderr for marker in _DEVICE_FAILURE_MARKERS)


def measure_coverage(
    language: str | DetectedLanguage,
    directory: str | PathLike[str],
    *,
    runner: ToolRunner | None = None,
    timeout: float | None = None,
) -> MetricResult:
    """Measure line coverage for ``language`` in ``directory``.

    Parameters
    ----------
    language : str | DetectedLanguage
        Language id or detection record.
    directory : str | PathLike[str]
        Project root the test suite runs in.
    runner : ToolRunner | None, optional
        Runner to use; defaults to the global process runner.
    timeout : float | None, optional
        Override for ``coverage_timeout_seconds``.

    Returns
    -------
    MetricResult
        Percentage in ``[0, 100]``, or the sentinel when the tool is missing,
        timed out, or a build precondition (a connected Android device) was
        not met.
    """
    language_id = language_of(language)
    profile = select_coverage_tool(language, directory)
    if profile is None:
        return log_result(language_id, unsupported_language("test_coverage", language_id))

    settings = get_runtime_settings()
    run = execute_profile(profile, directory, runner=runner, timeout=timeout)

    value: float | None = None
    if _is_gradle_jvm(language) and not run.timed_out and not run.not_found:
        if _device_missing(run):
            return log_result(
                language_id,
                MetricResult.failed("test_coverage", profile.tool, DEVICE_PRECONDITION_MESSAGE),
            )
        report_coverage = find_jacoco_coverage(directory)
        if report_coverage > 0:
            LOGGER.debug(
                "Using JaCoCo report coverage",
                extra={"operation": "measure", "tool": profile.tool, "value": report_coverage},
            )
            value = report_coverage

    result = interpret_run(
        "test_coverage",
        profile,
        run,
        timeout_message="Coverage measurement timed out",
        value=value,
        raw_limit=settings.raw_output_limit,
    )
    return log_result(language_id, result)

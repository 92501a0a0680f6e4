"""Tests for the type strictness, lint and coverage measurers.

Every measurer is driven by a :class:`~tests.helpers.runners.ScriptedRunner`
so tool selection, timeouts and failure folding are checked without
installing any analysis tool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from agent_readiness.metrics.coverage import (
    DEVICE_PRECONDITION_MESSAGE,
    find_jacoco_coverage,
    measure_coverage,
    select_coverage_tool,
)
from agent_readiness.metrics.linter import measure_lint_errors, select_linter
from agent_readiness.metrics.models import SENTINEL, MetricResult
from agent_readiness.metrics.type_checker import (
    NOT_APPLICABLE_TOOL,
    measure_type_strictness,
    select_type_checker,
)
from agent_readiness.types import DetectedLanguage
from tests.helpers import ScriptedRunner, assert_frozen_attribute, completed, missing, timed_out

if TYPE_CHECKING:
    from pathlib import Path

JACOCO_XML = (
    '<report name="app"><counter type="LINE" missed="20" covered="80"/></report>'
)


def _gradle(language: str, *, android: bool = False) -> DetectedLanguage:
    return DetectedLanguage(
        language=language,  # type: ignore[arg-type]
        markers=("build.gradle.kts",),
        build_system="gradle",
        is_android=android,
    )


def _write_jacoco(root: Path, xml: str = JACOCO_XML) -> None:
    report = root / "build" / "reports" / "jacoco" / "test" / "jacocoTestReport.xml"
    report.parent.mkdir(parents=True)
    report.write_text(xml, encoding="utf-8")


class TestMetricResult:
    """Tests for the result invariant."""

    def test_sentinel_requires_failure(self) -> None:
        """A sentinel value with ``success=True`` is rejected."""
        with pytest.raises(ValueError, match="inconsistent"):
            MetricResult(metric="lint_errors", tool="ruff", value=SENTINEL, success=True)

    def test_failure_requires_sentinel(self) -> None:
        """A failed result must carry the sentinel."""
        with pytest.raises(ValueError, match="inconsistent"):
            MetricResult(metric="lint_errors", tool="ruff", value=0, success=False)

    def test_failed_factory_and_immutability(self) -> None:
        """``failed`` builds a sentinel result; results are frozen."""
        result = MetricResult.failed("test_coverage", "c8", "c8 not found")
        assert result.value == SENTINEL
        assert not result.usable
        assert_frozen_attribute(result, "value", 10)


class TestTypeStrictness:
    """Tests for measure_type_strictness."""

    def test_counts_mypy_errors(self, tmp_path: Path) -> None:
        """mypy's summary line provides the count."""
        runner = ScriptedRunner(
            {"mypy": completed(stdout="a.py:1: error: x\nFound 3 errors in 1 file", returncode=1)}
        )
        result = measure_type_strictness("python", tmp_path, runner=runner)
        assert result == MetricResult(
            metric="type_strictness",
            tool="mypy",
            value=3,
            success=True,
            raw="a.py:1: error: x\nFound 3 errors in 1 file",
        )
        assert runner.calls[0].cwd == tmp_path
        assert runner.calls[0].timeout == 120

    def test_clean_tsc_run_is_zero(self, tmp_path: Path) -> None:
        """A passing ``tsc --noEmit`` reports zero errors."""
        runner = ScriptedRunner({"npx tsc": completed()})
        detected = DetectedLanguage(language="typescript")
        result = measure_type_strictness(detected, tmp_path, runner=runner)
        assert result.value == 0
        assert result.success
        assert runner.commands == [("npx", "tsc", "--noEmit")]

    @pytest.mark.parametrize("language", ["javascript", "ruby", "php"])
    def test_untyped_languages_skip_the_tool(self, tmp_path: Path, language: str) -> None:
        """Dynamically typed languages score a clean ``n/a`` without running anything."""
        runner = ScriptedRunner()
        result = measure_type_strictness(language, tmp_path, runner=runner)
        assert result.tool == NOT_APPLICABLE_TOOL
        assert result.value == 0
        assert result.success
        assert runner.calls == []

    def test_missing_checker_is_sentinel(self, tmp_path: Path) -> None:
        """A checker that is not installed yields the sentinel with its stderr."""
        runner = ScriptedRunner({"mypy": missing("mypy")})
        result = measure_type_strictness("python", tmp_path, runner=runner)
        assert result.value == SENTINEL
        assert not result.success
        assert result.raw == "mypy: command not found"

    def test_timeout_is_sentinel(self, tmp_path: Path) -> None:
        """A checker exceeding its timeout yields the sentinel."""
        runner = ScriptedRunner({"go vet": timed_out()})
        result = measure_type_strictness("go", tmp_path, runner=runner, timeout=5)
        assert result.raw == "go vet timed out"
        assert not result.success
        assert runner.calls[0].timeout == 5

    def test_unknown_language_is_sentinel(self, tmp_path: Path) -> None:
        """Languages with no checker configured fail with tool ``unknown``."""
        result = measure_type_strictness("cobol", tmp_path, runner=ScriptedRunner())
        assert result.tool == "unknown"
        assert result.value == SENTINEL

    def test_selection_table(self) -> None:
        """Every typed language has a checker; untyped ones have none."""
        assert select_type_checker("swift") is not None
        assert select_type_checker("ruby") is None


class TestLintErrors:
    """Tests for measure_lint_errors."""

    def test_counts_eslint_errors(self, tmp_path: Path) -> None:
        """ESLint records are summed."""
        runner = ScriptedRunner(
            {"npx eslint": completed(stdout='[{"errorCount": 4}, {"errorCount": 1}]', returncode=1)}
        )
        result = measure_lint_errors("typescript", tmp_path, runner=runner)
        assert (result.tool, result.value, result.success) == ("eslint", 5, True)

    def test_unparseable_json_exit_1_is_sentinel(self, tmp_path: Path) -> None:
        """A JSON linter exiting 1 with garbage is a failure, not zero errors."""
        runner = ScriptedRunner(
            {"ruff": completed(stdout="error: unexpected argument", returncode=1)}
        )
        result = measure_lint_errors("python", tmp_path, runner=runner)
        assert result.success is False
        assert result.value == SENTINEL
        assert result.raw == "error: unexpected argument"

    def test_checkstyle_stack_trace_is_sentinel(self, tmp_path: Path) -> None:
        """Checkstyle crashing before its audit is a failure, not a clean project."""
        trace = 'Exception in thread "main" java.lang.IllegalStateException: /google_checks.xml'
        runner = ScriptedRunner({"checkstyle": completed(stdout=trace, returncode=254)})
        result = measure_lint_errors("java", tmp_path, runner=runner)
        assert result.tool == "checkstyle"
        assert result.success is False
        assert result.value == SENTINEL

    def test_missing_linter_is_sentinel(self, tmp_path: Path) -> None:
        """A linter that is not installed yields the sentinel."""
        result = measure_lint_errors("ruby", tmp_path, runner=ScriptedRunner())
        assert result.value == SENTINEL
        assert result.tool == "rubocop"

    def test_timeout_message(self, tmp_path: Path) -> None:
        """Timeouts carry a readable explanation."""
        runner = ScriptedRunner({"swiftlint": timed_out()})
        result = measure_lint_errors("swift", tmp_path, runner=runner)
        assert result.raw == "Linter timed out"

    def test_gradle_jvm_uses_android_lint(self, tmp_path: Path) -> None:
        """Gradle Java and Kotlin projects run Android Lint through the wrapper."""
        runner = ScriptedRunner(
            {"./gradlew lint": completed(stdout="Lint found 2 errors, 5 warnings", returncode=0)}
        )
        result = measure_lint_errors(_gradle("kotlin"), tmp_path, runner=runner)
        assert result.tool == "android-lint"
        assert result.value == 2
        assert runner.calls[0].timeout == 180

    def test_android_lint_timeout_message(self, tmp_path: Path) -> None:
        """Android Lint timeouts are named as such."""
        runner = ScriptedRunner({"./gradlew lint": timed_out()})
        result = measure_lint_errors(_gradle("java"), tmp_path, runner=runner)
        assert result.raw == "Android Lint timed out"

    def test_maven_java_uses_checkstyle(self) -> None:
        """Non-Gradle Java keeps Checkstyle."""
        detected = DetectedLanguage(language="java", build_system="maven")
        profile = select_linter(detected)
        assert profile is not None
        assert profile.tool == "checkstyle"


class TestCoverageSelection:
    """Tests for coverage tool selection."""

    def test_vitest_config_wins(self, tmp_path: Path) -> None:
        """A vitest config file selects vitest."""
        (tmp_path / "vitest.config.ts").write_text("export default {}", encoding="utf-8")
        profile = select_coverage_tool("typescript", tmp_path)
        assert profile is not None
        assert profile.tool == "vitest"

    def test_jest_dependency_selects_jest(self, tmp_path: Path) -> None:
        """A jest dependency selects jest when vitest is absent."""
        (tmp_path / "package.json").write_text(
            '{"devDependencies": {"jest": "^29.0.0"}}', encoding="utf-8"
        )
        profile = select_coverage_tool("javascript", tmp_path)
        assert profile is not None
        assert profile.tool == "jest"

    def test_vitest_dependency_beats_jest(self, tmp_path: Path) -> None:
        """vitest is preferred over jest when both are declared."""
        (tmp_path / "package.json").write_text(
            '{"dependencies": {"jest": "1"}, "devDependencies": {"vitest": "1"}}',
            encoding="utf-8",
        )
        profile = select_coverage_tool("typescript", tmp_path)
        assert profile is not None
        assert profile.tool == "vitest"

    def test_malformed_manifest_falls_back_to_c8(self, tmp_path: Path) -> None:
        """An unreadable package.json keeps the default runner."""
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        profile = select_coverage_tool("typescript", tmp_path)
        assert profile is not None
        assert profile.tool == "c8"

    def test_gradle_unit_tests_preferred_over_android(self, tmp_path: Path) -> None:
        """``src/test`` selects JVM unit-test coverage even on Android."""
        (tmp_path / "src" / "test").mkdir(parents=True)
        profile = select_coverage_tool(_gradle("kotlin", android=True), tmp_path)
        assert profile is not None
        assert profile.command == ("./gradlew", "test", "jacocoTestReport")

    def test_android_without_unit_tests(self, tmp_path: Path) -> None:
        """Android projects without unit tests use instrumented coverage."""
        profile = select_coverage_tool(_gradle("kotlin", android=True), tmp_path)
        assert profile is not None
        assert profile.tool == "jacoco (android)"


class TestCoverage:
    """Tests for measure_coverage."""

    def test_pytest_cov_total(self, tmp_path: Path) -> None:
        """pytest-cov's TOTAL row becomes the value."""
        runner = ScriptedRunner({"pytest": completed(stdout="TOTAL    10    2    80%\n")})
        result = measure_coverage("python", tmp_path, runner=runner)
        assert (result.tool, result.value, result.success) == ("pytest-cov", 80, True)
        assert runner.calls[0].timeout == 600

    def test_raw_output_is_truncated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Successful results keep at most ``raw_output_limit`` characters."""
        monkeypatch.setenv("AGENT_READINESS_RAW_OUTPUT_LIMIT", "5")
        runner = ScriptedRunner({"go test": completed(stdout="ok coverage: 50.0% of statements")})
        result = measure_coverage("go", tmp_path, runner=runner)
        assert result.value == 50
        assert result.raw == "ok co"

    def test_timeout_is_sentinel(self, tmp_path: Path) -> None:
        """A test suite exceeding its timeout yields the sentinel."""
        runner = ScriptedRunner({"swift test": timed_out(stdout="TOTAL 90%")})
        result = measure_coverage("swift", tmp_path, runner=runner)
        assert result.value == SENTINEL
        assert result.raw == "Coverage measurement timed out"

    def test_gradle_report_overrides_stdout(self, tmp_path: Path) -> None:
        """A JaCoCo report supplies the Gradle coverage figure."""
        (tmp_path / "src" / "test").mkdir(parents=True)
        _write_jacoco(tmp_path)
        runner = ScriptedRunner({"./gradlew test": completed(stdout="BUILD SUCCESSFUL")})
        result = measure_coverage(_gradle("java"), tmp_path, runner=runner)
        assert result.tool == "jacoco (gradle)"
        assert result.value == 80
        assert result.success

    def test_gradle_without_report_is_zero(self, tmp_path: Path) -> None:
        """No report after a successful build means 0% coverage."""
        (tmp_path / "src" / "test").mkdir(parents=True)
        runner = ScriptedRunner({"./gradlew test": completed(stdout="BUILD SUCCESSFUL")})
        result = measure_coverage(_gradle("kotlin"), tmp_path, runner=runner)
        assert result.value == 0
        assert result.success

    def test_android_without_device_is_sentinel(self, tmp_path: Path) -> None:
        """Instrumented tests without a device fail with a precondition message."""
        runner = ScriptedRunner(
            {
                "./gradlew createDebugCoverageReport": completed(
                    stderr="com.android.builder.testing.api.DeviceException: No connected devices!",
                    returncode=1,
                )
            }
        )
        result = measure_coverage(_gradle("kotlin", android=True), tmp_path, runner=runner)
        assert result.value == SENTINEL
        assert result.raw == DEVICE_PRECONDITION_MESSAGE

    def test_missing_gradle_wrapper_is_sentinel(self, tmp_path: Path) -> None:
        """A missing wrapper short-circuits before reading reports."""
        _write_jacoco(tmp_path)
        result = measure_coverage(_gradle("java"), tmp_path, runner=ScriptedRunner())
        assert result.value == SENTINEL

    def test_find_jacoco_coverage_skips_empty_reports(self, tmp_path: Path) -> None:
        """Reports with no covered lines are skipped in favour of later paths."""
        _write_jacoco(tmp_path, '<report><counter type="LINE" missed="5" covered="0"/></report>')
        fallback = tmp_path / "build" / "reports" / "jacoco" / "jacocoTestReport.xml"
        fallback.write_text(JACOCO_XML, encoding="utf-8")
        assert find_jacoco_coverage(tmp_path) == 80

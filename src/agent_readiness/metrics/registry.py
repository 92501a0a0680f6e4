"""Declarative tool profiles for every language and metric.

A :class:`ToolProfile` pins the tool label, the command line, the output
family that parses it and the family's extraction options. Profiles are
static data; the measurers only choose between them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

__all__ = [
    "ANDROID_COVERAGE_PROFILE",
    "COVERAGE_PROFILES",
    "GRADLE_COVERAGE_PROFILE",
    "GRADLE_JVM_COVERAGE_PROFILE",
    "GRADLE_LINT_PROFILE",
    "JACOCO_REPORT_PATHS",
    "JEST_COVERAGE_PROFILE",
    "LINT_PROFILES",
    "TYPE_CHECK_PROFILES",
    "UNTYPED_LANGUAGES",
    "VITEST_CONFIG_FILES",
    "VITEST_COVERAGE_PROFILE",
    "ToolProfile",
]

_NO_OPTIONS: Final[Mapping[str, Any]] = MappingProxyType({})


@dataclass(slots=True, frozen=True)
class ToolProfile:
    """How to run one tool and read its output.

    Attributes
    ----------
    tool : str
        Label reported on results (``"mypy"``, ``"jacoco (gradle)"``, ...).
    command : tuple[str, ...]
        Executable and arguments, run in the project directory.
    family : str
        Output family tag understood by :func:`agent_readiness.metrics.parsers.parse_output`.
    options : Mapping[str, Any]
        Keyword options forwarded to the family parser.
    timeout_setting : str
        Name of the :class:`~agent_readiness._shared.settings.ReadinessSettings`
        field holding this profile's timeout.
    """

    tool: str
    command: tuple[str, ...]
    family: str
    options: Mapping[str, Any] = field(default=_NO_OPTIONS)
    timeout_setting: str = "default_timeout_seconds"


def _profile(
    tool: str,
    command: tuple[str, ...],
    family: str,
    timeout_setting: str,
    **options: Any,  # noqa: ANN401
) -> ToolProfile:
    return ToolProfile(
        tool=tool,
        command=command,
        family=family,
        options=MappingProxyType(options) if options else _NO_OPTIONS,
        timeout_setting=timeout_setting,
    )


# --------------------------------------------------------------------------- #
# Type strictness
# --------------------------------------------------------------------------- #

_TYPE = "type_check_timeout_seconds"
_FOUND_N_ERRORS = r"Found (\d+) errors?"
_COLON_ERROR = r": error:"

UNTYPED_LANGUAGES: Final[frozenset[str]] = frozenset({"javascript", "ruby", "php"})
"""Languages without a static type system; their type dimension is reported as ``n/a``."""

TYPE_CHECK_PROFILES: Final[Mapping[str, ToolProfile]] = MappingProxyType(
    {
        "typescript": _profile(
            "tsc",
            ("npx", "tsc", "--noEmit"),
            "compiler-text",
            _TYPE,
            summary_pattern=_FOUND_N_ERRORS,
            line_pattern=r"error TS\d+:",
        ),
        "python": _profile(
            "mypy",
            ("mypy", "."),
            "compiler-text",
            _TYPE,
            summary_pattern=_FOUND_N_ERRORS,
            line_pattern=r":\d+: error:",
        ),
        "go": _profile(
            "go vet",
            ("go", "vet", "./..."),
            "compiler-text",
            _TYPE,
            line_pattern=r"^.*\.go:\d+:\d*:.*$",
        ),
        "java": _profile(
            "javac",
            ("javac", "-Xlint:all", "-d", "/tmp", "-sourcepath", "."),
            "compiler-text",
            _TYPE,
            line_pattern=_COLON_ERROR,
        ),
        "kotlin": _profile(
            "kotlinc",
            ("kotlinc", "-Werror"),
            "compiler-text",
            _TYPE,
            line_pattern=_COLON_ERROR,
        ),
        "swift": _profile(
            "swiftc",
            ("swift", "build"),
            "compiler-text",
            _TYPE,
            line_pattern=_COLON_ERROR,
        ),
    }
)

# --------------------------------------------------------------------------- #
# Lint errors
# --------------------------------------------------------------------------- #

_LINT = "lint_timeout_seconds"

_ESLINT = _profile("eslint", ("npx", "eslint", ".", "--format", "json"), "json-record-sum", _LINT)

LINT_PROFILES: Final[Mapping[str, ToolProfile]] = MappingProxyType(
    {
        "typescript": _ESLINT,
        "javascript": _ESLINT,
        "python": _profile(
            "ruff", ("ruff", "check", ".", "--output-format", "json"), "json-array-length", _LINT
        ),
        "go": _profile(
            "golangci-lint",
            ("golangci-lint", "run", "--out-format", "json"),
            "json-object-issues",
            _LINT,
        ),
        "java": _profile(
            "checkstyle",
            ("checkstyle", "-c", "/google_checks.xml", "-f", "xml", "src/main/java"),
            "xml-element-count",
            _LINT,
        ),
        "swift": _profile(
            "swiftlint", ("swiftlint", "lint", "--reporter", "json"), "json-severity-count", _LINT
        ),
        "kotlin": _profile(
            "ktlint", ("ktlint", "--reporter=json"), "json-nested-array-sum", _LINT
        ),
        "ruby": _profile("rubocop", ("rubocop", "--format", "json"), "json-files-offenses", _LINT),
        "php": _profile("phpcs", ("phpcs", "--report=json", "."), "json-totals-field", _LINT),
    }
)

GRADLE_LINT_PROFILE: Final[ToolProfile] = _profile(
    "android-lint",
    ("./gradlew", "lint"),
    "compiler-text",
    "gradle_lint_timeout_seconds",
    summary_pattern=r"(\d+)\s+errors?",
    line_pattern=r"Error:",
    clean_exit_is_zero=False,
)
"""Android Lint, used for Java and Kotlin projects built with Gradle."""

# --------------------------------------------------------------------------- #
# Test coverage
# --------------------------------------------------------------------------- #

_COVERAGE = "coverage_timeout_seconds"

_C8 = _profile(
    "c8",
    ("npx", "c8", "--reporter=text-summary", "npm", "test"),
    "coverage-summary-table",
    _COVERAGE,
)

COVERAGE_PROFILES: Final[Mapping[str, ToolProfile]] = MappingProxyType(
    {
        "typescript": _C8,
        "javascript": _C8,
        "python": _profile(
            "pytest-cov",
            ("pytest", "--cov=.", "--cov-report=term-missing", "-q"),
            "coverage-total-row",
            _COVERAGE,
        ),
        "go": _profile(
            "go test", ("go", "test", "-cover", "./..."), "coverage-per-package", _COVERAGE
        ),
        "java": _profile("jacoco", ("mvn", "test", "jacoco:report"), "coverage-generic", _COVERAGE),
        "kotlin": _profile(
            "jacoco", ("./gradlew", "test", "jacocoTestReport"), "coverage-generic", _COVERAGE
        ),
        "swift": _profile(
            "swift test", ("swift", "test", "--enable-code-coverage"), "coverage-generic", _COVERAGE
        ),
        "ruby": _profile(
            "simplecov",
            ("bundle", "exec", "rspec", "--format", "progress"),
            "coverage-generic",
            _COVERAGE,
        ),
        "php": _profile(
            "phpunit", ("./vendor/bin/phpunit", "--coverage-text"), "coverage-generic", _COVERAGE
        ),
    }
)

VITEST_CONFIG_FILES: Final[tuple[str, ...]] = (
    "vitest.config.ts",
    "vitest.config.js",
    "vitest.config.mts",
    "vitest.config.mjs",
)

VITEST_COVERAGE_PROFILE: Final[ToolProfile] = _profile(
    "vitest", ("npx", "vitest", "run", "--coverage"), "coverage-summary-table", _COVERAGE
)

JEST_COVERAGE_PROFILE: Final[ToolProfile] = _profile(
    "jest",
    ("npx", "jest", "--coverage", "--coverageReporters=text-summary"),
    "coverage-generic",
    _COVERAGE,
)

GRADLE_JVM_COVERAGE_PROFILE: Final[ToolProfile] = _profile(
    "jacoco (gradle)", ("./gradlew", "test", "jacocoTestReport"), "report-file", _COVERAGE
)
"""JVM unit tests under ``src/test``; the figure comes from the JaCoCo XML report."""

ANDROID_COVERAGE_PROFILE: Final[ToolProfile] = _profile(
    "jacoco (android)", ("./gradlew", "createDebugCoverageReport"), "report-file", _COVERAGE
)
"""Instrumented Android tests; these need a connected device or emulator."""

GRADLE_COVERAGE_PROFILE: Final[ToolProfile] = _profile(
    "jacoco (gradle)", ("./gradlew", "test", "jacocoTestReport"), "coverage-generic", _COVERAGE
)

JACOCO_REPORT_PATHS: Final[tuple[tuple[str, ...], ...]] = (
    ("build", "reports", "jacoco", "test", "jacocoTestReport.xml"),
    ("build", "reports", "coverage", "debug", "report.xml"),
    ("build", "reports", "jacoco", "jacocoTestReport.xml"),
)
"""JaCoCo XML report locations relative to the project, in lookup order."""

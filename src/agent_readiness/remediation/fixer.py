"""Run language-specific auto-fix tools.

Each language maps to one formatter or linter in fix mode. Tools differ in how
much they report, so every fixer has its own output reader; ``-1`` in
:attr:`FixResult.files_modified` means the tool does not report a count.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from agent_readiness._shared.logging import get_logger
from agent_readiness._shared.proc import get_process_runner
from agent_readiness._shared.process import EXIT_NOT_FOUND
from agent_readiness._shared.settings import get_runtime_settings
from agent_readiness.types import language_of

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness._shared.process import ToolRunner
    from agent_readiness.types import DetectedLanguage

__all__ = [
    "FIX_TOOLS",
    "UNKNOWN_COUNT",
    "FixResult",
    "FixTool",
    "fix_command",
    "run_fix",
]

LOGGER = get_logger(__name__)

UNKNOWN_COUNT: Final = -1


@dataclass(slots=True, frozen=True)
class FixResult:
    """Outcome of one auto-fix run."""

    success: bool
    files_modified: int
    message: str
    tool: str


type FixOutputReader = Callable[[str, str, int], FixResult]


@dataclass(slots=True, frozen=True)
class FixTool:
    """Auto-fix command for one language and the reader for its output."""

    tool: str
    command: tuple[str, ...]
    read_output: FixOutputReader

    @property
    def command_line(self) -> str:
        """Return the command as a copy-pasteable string."""
        return " ".join(self.command)


def _status_only(tool: str, display: str) -> FixOutputReader:
    def read(stdout: str, stderr: str, returncode: int) -> FixResult:
        del stdout
        if returncode == 0:
            return FixResult(True, UNKNOWN_COUNT, f"{display} completed successfully", tool)
        return FixResult(False, 0, stderr or f"{display} failed", tool)

    return read


def read_eslint_output(stdout: str, stderr: str, returncode: int) -> FixResult:
    """ESLint exits 1 when unfixable problems remain; the fix pass still ran."""
    del stdout, stderr
    if returncode == 0:
        return FixResult(True, UNKNOWN_COUNT, "ESLint fix completed successfully", "eslint")
    return FixResult(
        True, UNKNOWN_COUNT, "ESLint fix completed with remaining unfixable issues", "eslint"
    )


def read_ruff_output(stdout: str, stderr: str, returncode: int) -> FixResult:
    """Ruff reports ``Fixed N errors`` on stderr."""
    del stdout
    fixed = re.search(r"Fixed (\d+) errors?", stderr, re.IGNORECASE)
    files = re.search(r"in (\d+) files?", stderr, re.IGNORECASE)
    if returncode == 0 or fixed:
        return FixResult(
            success=True,
            files_modified=int(files.group(1)) if files else UNKNOWN_COUNT,
            message=f"Ruff fixed {fixed.group(1)} errors" if fixed else "Ruff fix completed",
            tool="ruff",
        )
    return FixResult(False, 0, stderr or "Ruff fix failed", "ruff")


def read_swiftformat_output(stdout: str, stderr: str, returncode: int) -> FixResult:
    """SwiftFormat prints one line per formatted file."""
    if returncode == 0:
        lines = [line for line in stdout.splitlines() if line.strip()]
        return FixResult(
            True, len(lines) or UNKNOWN_COUNT, "SwiftFormat completed successfully", "swiftformat"
        )
    return FixResult(False, 0, stderr or "SwiftFormat failed", "swiftformat")


def read_rubocop_output(stdout: str, stderr: str, returncode: int) -> FixResult:
    """RuboCop summarises ``N files inspected, ... N offenses corrected``."""
    corrected = re.search(r"(\d+) offenses? corrected", stdout, re.IGNORECASE)
    inspected = re.search(r"(\d+) files? inspected", stdout, re.IGNORECASE)
    if returncode == 0 or corrected:
        return FixResult(
            success=True,
            files_modified=int(inspected.group(1)) if inspected else UNKNOWN_COUNT,
            message=(
                f"RuboCop corrected {corrected.group(1)} offenses"
                if corrected
                else "RuboCop auto-correct completed"
            ),
            tool="rubocop",
        )
    return FixResult(False, 0, stderr or stdout or "RuboCop auto-correct failed", "rubocop")


def read_php_cs_fixer_output(stdout: str, stderr: str, returncode: int) -> FixResult:
    """PHP-CS-Fixer lists the ``.php`` files it changed."""
    if returncode == 0:
        fixed = [line for line in stdout.splitlines() if ".php" in line]
        message = f"PHP-CS-Fixer fixed {len(fixed)} files" if fixed else "PHP-CS-Fixer completed"
        return FixResult(True, len(fixed) or UNKNOWN_COUNT, message, "php-cs-fixer")
    return FixResult(False, 0, stderr or "PHP-CS-Fixer failed", "php-cs-fixer")


_ESLINT_FIX = FixTool("eslint", ("npx", "eslint", ".", "--fix"), read_eslint_output)

FIX_TOOLS: Final[Mapping[str, FixTool]] = MappingProxyType(
    {
        "typescript": _ESLINT_FIX,
        "javascript": _ESLINT_FIX,
        "python": FixTool("ruff", ("ruff", "check", ".", "--fix"), read_ruff_output),
        "go": FixTool("gofmt", ("gofmt", "-w", "."), _status_only("gofmt", "gofmt")),
        "java": FixTool(
            "google-java-format",
            ("google-java-format", "--replace", "--glob", "**/*.java"),
            _status_only("google-java-format", "google-java-format"),
        ),
        "swift": FixTool("swiftformat", ("swiftformat", "."), read_swiftformat_output),
        "kotlin": FixTool(
            "ktlint", ("ktlint", "--format"), _status_only("ktlint", "ktlint format")
        ),
        "ruby": FixTool("rubocop", ("rubocop", "--autocorrect"), read_rubocop_output),
        "php": FixTool("php-cs-fixer", ("php-cs-fixer", "fix", "."), read_php_cs_fixer_output),
    }
)


def fix_command(language: str) -> str | None:
    """Return the auto-fix command line for ``language``, if one is configured."""
    fixer = FIX_TOOLS.get(language)
    return fixer.command_line if fixer is not None else None


def run_fix(
    language: str | DetectedLanguage,
    directory: str | PathLike[str],
    *,
    runner: ToolRunner | None = None,
    timeout: float | None = None,
) -> FixResult:
    """Run the auto-fix tool for ``language`` inside ``directory``.

    Parameters
    ----------
    language : str | DetectedLanguage
        Language id or detection record.
    directory : str | PathLike[str]
        Project root the fixer runs in.
    runner : ToolRunner | None, optional
        Runner to use; defaults to the global process runner.
    timeout : float | None, optional
        Override for ``fix_timeout_seconds``.

    Returns
    -------
    FixResult
        Outcome of the fix; a missing tool or timeout is a failed result.
    """
    language_id = language_of(language)
    fixer = FIX_TOOLS.get(language_id)
    if fixer is None:
        return FixResult(False, 0, f"No auto-fix tool configured for '{language_id}'", "unknown")

    active_runner = runner if runner is not None else get_process_runner()
    run = active_runner.run(
        fixer.command,
        cwd=Path(directory),
        timeout=timeout if timeout is not None else get_runtime_settings().fix_timeout_seconds,
    )
    if run.returncode == EXIT_NOT_FOUND:
        result = FixResult(
            False, 0, f"{fixer.tool} not found. Install it to enable auto-fix.", fixer.tool
        )
    elif run.timed_out:
        result = FixResult(False, 0, f"{fixer.tool} timed out", fixer.tool)
    else:
        result = fixer.read_output(run.stdout, run.stderr, run.returncode)

    LOGGER.info(
        "Auto-fix finished",
        extra={
            "operation": "fix",
            "status": "success" if result.success else "error",
            "language": language_id,
            "tool": result.tool,
            "files_modified": result.files_modified,
        },
    )
    return result

"""Scripted tool runners for exercising measurers without subprocesses.

Example
-------
>>> from tests.helpers.runners import ScriptedRunner, completed
>>> runner = ScriptedRunner({"mypy": completed(stdout="Success: no issues found")})
>>> runner.run(["mypy", "."]).returncode
0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agent_readiness._shared.process import EXIT_NOT_FOUND, EXIT_TIMED_OUT, ToolRunResult

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

__all__ = [
    "RecordedCall",
    "ScriptedRunner",
    "completed",
    "missing",
    "timed_out",
]


def completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> ToolRunResult:
    """Return a finished run with the given streams and exit status."""
    return ToolRunResult(
        command=(),
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
        duration_seconds=0.01,
        timed_out=False,
    )


def missing(executable: str = "tool") -> ToolRunResult:
    """Return a run whose executable was not found."""
    return ToolRunResult(
        command=(executable,),
        returncode=EXIT_NOT_FOUND,
        stdout="",
        stderr=f"{executable}: command not found",
        duration_seconds=0.0,
        timed_out=False,
    )


def timed_out(stdout: str = "") -> ToolRunResult:
    """Return a run that hit its timeout."""
    return ToolRunResult(
        command=(),
        returncode=EXIT_TIMED_OUT,
        stdout=stdout,
        stderr="",
        duration_seconds=1.0,
        timed_out=True,
    )


@dataclass(slots=True, frozen=True)
class RecordedCall:
    """Arguments of one :meth:`ScriptedRunner.run` call."""

    command: tuple[str, ...]
    cwd: Path | None
    timeout: float | None


@dataclass(slots=True)
class ScriptedRunner:
    """Runner answering by the first command word.

    Keys may be a bare executable (``"mypy"``) or a space-joined prefix of
    the command (``"./gradlew lint"``); the longest matching key wins. Commands
    without a scripted answer behave like a missing executable.
    """

    responses: dict[str, ToolRunResult] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ToolRunResult:
        """Record the call and return the scripted result."""
        final_command = tuple(command)
        self.calls.append(RecordedCall(final_command, cwd, timeout))
        joined = " ".join(final_command)
        matches = [key for key in self.responses if joined == key or joined.startswith(f"{key} ")]
        if not matches:
            return missing(final_command[0] if final_command else "tool")
        return self.responses[max(matches, key=len)]

    @property
    def commands(self) -> list[tuple[str, ...]]:
        """Commands executed so far, in order."""
        return [call.command for call in self.calls]

"""Module-level facade over a replaceable :class:`ProcessRunner`.

Measurers call :func:`get_process_runner` when no runner is injected, so tests
and embedding applications can swap the global runner with
:func:`set_process_runner`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from agent_readiness._shared.process import ProcessRunner, ToolRunner, ToolRunResult

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


@dataclass(slots=True, frozen=True)
class _ProcessRunnerState:
    runner: ToolRunner


_PROCESS_STATE: list[_ProcessRunnerState] = [_ProcessRunnerState(ProcessRunner())]


def get_process_runner() -> ToolRunner:
    """Return the global runner used by :func:`run_tool`."""
    return _PROCESS_STATE[0].runner


def set_process_runner(runner: ToolRunner) -> ToolRunner:
    """Replace the global runner used by :func:`run_tool`.

    Callers should restore the previous runner when finished.

    Parameters
    ----------
    runner : ToolRunner
        Runner to install.

    Returns
    -------
    ToolRunner
        The runner that was installed before this call.
    """
    previous = _PROCESS_STATE[0].runner
    _PROCESS_STATE[0] = replace(_PROCESS_STATE[0], runner=runner)
    return previous


def run_tool(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> ToolRunResult:
    """Execute ``command`` using the global runner.

    Parameters
    ----------
    command : Sequence[str]
        Command to execute.
    cwd : Path | None, optional
        Working directory. Default is None.
    timeout : float | None, optional
        Timeout in seconds. Default is None, meaning the configured default.

    Returns
    -------
    ToolRunResult
        Execution result; never raises for process failures.
    """
    return _PROCESS_STATE[0].runner.run(command, cwd=cwd, timeout=timeout)


__all__ = [
    "ProcessRunner",
    "ToolRunResult",
    "ToolRunner",
    "get_process_runner",
    "run_tool",
    "set_process_runner",
]

"""Process execution adapter for external analysis tools.

:class:`ProcessRunner` runs one command with a bounded timeout and turns every
outcome into a :class:`ToolRunResult`. It never raises for process failures:
a missing executable is reported as exit status 127, a timeout as exit status
-1 with ``timed_out`` set, and any other spawn failure, a missing working
directory included, as exit status 1. Each failure also carries an RFC 9457
Problem Details payload for logging.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from agent_readiness._shared.logging import get_logger
from agent_readiness._shared.metrics import ToolRunObservation, observe_tool_run
from agent_readiness._shared.problem_details import (
    render_problem,
    tool_failure_problem_details,
    tool_missing_problem_details,
    tool_timeout_problem_details,
)
from agent_readiness._shared.settings import get_runtime_settings

if TYPE_CHECKING:
    from agent_readiness._shared.logging import LoggerAdapter
    from agent_readiness._shared.problem_details import ProblemDetailsDict
    from agent_readiness._shared.settings import ReadinessSettings

Command = Sequence[str]
ObservationFactory = Callable[
    [Sequence[str], Path | None, float | None], AbstractContextManager[ToolRunObservation]
]

EXIT_NOT_FOUND = 127
EXIT_TIMED_OUT = -1
EXIT_SPAWN_FAILED = 1


@dataclass(slots=True, frozen=True)
class ToolRunResult:
    """Structured result from invoking a subprocess."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float
    timed_out: bool
    problem: ProblemDetailsDict | None = None

    @property
    def not_found(self) -> bool:
        """Return ``True`` when the executable could not be located."""
        return self.returncode == EXIT_NOT_FOUND


class ToolRunner(Protocol):
    """Anything able to execute a command and report a :class:`ToolRunResult`."""

    def run(
        self,
        command: Command,
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ToolRunResult: ...


def _default_observer_factory(
    command: Sequence[str],
    cwd: Path | None,
    timeout: float | None,
) -> AbstractContextManager[ToolRunObservation]:
    return observe_tool_run(command, cwd=cwd, timeout=timeout)


@dataclass(slots=True)
class ProcessRunner:
    """Execute analysis tool subprocesses with shared timeout and observability policies."""

    observer_factory: ObservationFactory = field(default=_default_observer_factory)
    settings_loader: Callable[[], ReadinessSettings] = field(default=get_runtime_settings)
    logger: LoggerAdapter = field(default_factory=lambda: get_logger(__name__))

    def run(
        self,
        command: Command,
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ToolRunResult:
        """Execute ``command`` and return its normalised outcome.

        Parameters
        ----------
        command : Sequence[str]
            Executable followed by its arguments.
        cwd : Path | None, optional
            Working directory. Defaults to the current directory.
        timeout : float | None, optional
            Timeout in seconds. Defaults to ``default_timeout_seconds`` from settings.
        env : Mapping[str, str] | None, optional
            Variables layered on top of the inherited environment.

        Returns
        -------
        ToolRunResult
            Outcome of the run. Failures are encoded in ``returncode``,
            ``timed_out`` and ``problem`` rather than raised.
        """
        final_command = tuple(str(part) for part in command)
        if not final_command:
            return ToolRunResult(
                command=(),
                returncode=EXIT_SPAWN_FAILED,
                stdout="",
                stderr="No command provided",
                duration_seconds=0.0,
                timed_out=False,
            )
        effective_timeout = (
            timeout if timeout is not None else self.settings_loader().default_timeout_seconds
        )

        with self.observer_factory(final_command, cwd, effective_timeout) as observation:
            try:
                completed = self._spawn(
                    final_command, cwd=cwd, env=env, timeout=effective_timeout
                )
            except subprocess.TimeoutExpired as exc:
                observation.failure("timeout", returncode=EXIT_TIMED_OUT, timed_out=True)
                problem = tool_timeout_problem_details(final_command, timeout=effective_timeout)
                self.logger.debug(
                    "Subprocess timed out",
                    extra={"operation": "tool_run", "problem": render_problem(problem)},
                )
                return ToolRunResult(
                    command=final_command,
                    returncode=EXIT_TIMED_OUT,
                    stdout=_decode_stream(exc.stdout),
                    stderr=_decode_stream(exc.stderr),
                    duration_seconds=observation.duration_seconds(),
                    timed_out=True,
                    problem=problem,
                )
            except FileNotFoundError as exc:
                if cwd is not None and not Path(cwd).is_dir():
                    detail = f"Working directory does not exist: {cwd}"
                    return self._spawn_failure(final_command, observation, detail)
                observation.failure("missing_executable", returncode=EXIT_NOT_FOUND)
                detail = f"{final_command[0]}: command not found"
                problem = tool_missing_problem_details(
                    final_command, executable=final_command[0], detail=str(exc)
                )
                return ToolRunResult(
                    command=final_command,
                    returncode=EXIT_NOT_FOUND,
                    stdout="",
                    stderr=detail,
                    duration_seconds=observation.duration_seconds(),
                    timed_out=False,
                    problem=problem,
                )
            except (OSError, ValueError) as exc:
                # ValueError: arguments the OS cannot accept, e.g. an embedded NUL.
                return self._spawn_failure(final_command, observation, str(exc))

            observation.success(completed.returncode)
            return ToolRunResult(
                command=final_command,
                returncode=completed.returncode,
                stdout=completed.stdout or "",
                stderr=completed.stderr or "",
                duration_seconds=observation.duration_seconds(),
                timed_out=False,
            )

    @staticmethod
    def _spawn_failure(
        final_command: tuple[str, ...], observation: ToolRunObservation, detail: str
    ) -> ToolRunResult:
        observation.failure("spawn_error", returncode=EXIT_SPAWN_FAILED)
        problem = tool_failure_problem_details(
            final_command, returncode=EXIT_SPAWN_FAILED, detail=detail
        )
        return ToolRunResult(
            command=final_command,
            returncode=EXIT_SPAWN_FAILED,
            stdout="",
            stderr=detail,
            duration_seconds=observation.duration_seconds(),
            timed_out=False,
            problem=problem,
        )

    @staticmethod
    def _spawn(
        final_command: tuple[str, ...],
        *,
        cwd: Path | None,
        env: Mapping[str, str] | None,
        timeout: float,
    ) -> subprocess.CompletedProcess[str]:
        merged_env = None
        if env:
            merged_env = dict(os.environ)
            merged_env.update(env)
        return subprocess.run(  # noqa: S603
            final_command,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )


def _decode_stream(stream: object) -> str:
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    if stream is None:
        return ""
    return str(stream)


__all__ = [
    "EXIT_NOT_FOUND",
    "EXIT_SPAWN_FAILED",
    "EXIT_TIMED_OUT",
    "ProcessRunner",
    "ToolRunResult",
    "ToolRunner",
]

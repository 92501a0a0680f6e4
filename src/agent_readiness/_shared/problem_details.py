"""RFC 9457 Problem Details for failed tool runs and invalid settings.

A run that cannot produce a measurement is still returned as data, but the
runner attaches one of these payloads so logs carry a machine-readable
reason. Every payload is typed by a :class:`ProblemType`; tool payloads use an
``urn:tool:<executable>:<suffix>`` instance and always record the command.

Examples
--------
>>> from agent_readiness._shared.problem_details import tool_timeout_problem_details
>>> problem = tool_timeout_problem_details(["mypy", "."], timeout=120)
>>> problem["type"], problem["status"], problem["instance"]
('https://agent-readiness.dev/problems/tool-timeout', 504, 'urn:tool:mypy:timeout')
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import PurePath
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

__all__ = [
    "PROBLEM_TYPE_BASE",
    "SETTINGS_INVALID",
    "TOOL_FAILURE",
    "TOOL_MISSING",
    "TOOL_TIMEOUT",
    "JsonPrimitive",
    "JsonValue",
    "ProblemDetailsDict",
    "ProblemType",
    "build_problem_details",
    "build_tool_problem_details",
    "render_problem",
    "settings_problem_details",
    "tool_failure_problem_details",
    "tool_missing_problem_details",
    "tool_timeout_problem_details",
]

type JsonPrimitive = str | int | float | bool | None
type JsonValue = JsonPrimitive | list[JsonValue] | dict[str, JsonValue]
type ProblemDetailsDict = dict[str, JsonValue]

PROBLEM_TYPE_BASE: Final = "https://agent-readiness.dev/problems"


@dataclass(frozen=True, slots=True)
class ProblemType:
    """A problem category: URI slug, human title and HTTP-style status."""

    slug: str
    title: str
    status: int

    @property
    def uri(self) -> str:
        """Absolute ``type`` URI of the category."""
        return f"{PROBLEM_TYPE_BASE}/{self.slug}"


TOOL_MISSING: Final = ProblemType("tool-missing", "Executable not found", 500)
TOOL_TIMEOUT: Final = ProblemType("tool-timeout", "Tool execution timed out", 504)
TOOL_FAILURE: Final = ProblemType("tool-failure", "Tool failed to run", 500)
SETTINGS_INVALID: Final = ProblemType("settings-invalid", "Invalid readiness settings", 500)


def build_problem_details(
    problem_type: ProblemType,
    *,
    detail: str,
    instance: str,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetailsDict:
    """Return an RFC 9457 payload for ``problem_type``.

    Extension members are merged into the top-level object; they never
    replace the five standard members.

    Parameters
    ----------
    problem_type : ProblemType
        Category supplying ``type``, ``title`` and ``status``.
    detail : str
        Occurrence-specific explanation.
    instance : str
        URI identifying this occurrence.
    extensions : Mapping[str, JsonValue] | None, optional
        Additional members such as the command or exit status.

    Returns
    -------
    ProblemDetailsDict
        JSON-compatible payload.
    """
    payload: ProblemDetailsDict = {str(key): value for key, value in (extensions or {}).items()}
    payload.update(
        {
            "type": problem_type.uri,
            "title": problem_type.title,
            "status": problem_type.status,
            "detail": detail,
            "instance": instance,
        }
    )
    return payload


def _executable_name(command: Sequence[str]) -> str:
    return PurePath(command[0]).name if command else "<unknown>"


def build_tool_problem_details(
    problem_type: ProblemType,
    command: Sequence[str],
    *,
    detail: str,
    suffix: str,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetailsDict:
    """Return a payload describing a tool run; ``command`` is always recorded."""
    members: dict[str, JsonValue] = {"command": [str(part) for part in command]}
    members.update(extensions or {})
    return build_problem_details(
        problem_type,
        detail=detail,
        instance=f"urn:tool:{_executable_name(command)}:{suffix}",
        extensions=members,
    )


def tool_timeout_problem_details(
    command: Sequence[str], *, timeout: float | None
) -> ProblemDetailsDict:
    """Return a 504 payload for a run that exceeded ``timeout`` seconds."""
    detail = f"Command '{command[0]}' timed out" if command else "Command timed out"
    if timeout is not None:
        detail = f"{detail} after {timeout} seconds"
    return build_tool_problem_details(
        TOOL_TIMEOUT,
        command,
        detail=detail,
        suffix="timeout",
        extensions={"timeout": timeout} if timeout is not None else None,
    )


def tool_missing_problem_details(
    command: Sequence[str], *, executable: str, detail: str
) -> ProblemDetailsDict:
    """Return a payload for an executable that is not installed or not on ``PATH``."""
    return build_tool_problem_details(
        TOOL_MISSING,
        command or [executable],
        detail=detail,
        suffix="missing",
        extensions={"executable": executable},
    )


def tool_failure_problem_details(
    command: Sequence[str], *, returncode: int, detail: str
) -> ProblemDetailsDict:
    """Return a payload for a tool that could not be started.

    Parameters
    ----------
    command : Sequence[str]
        Command that failed.
    returncode : int
        Exit status assigned to the failure.
    detail : str
        Operating-system error text.

    Returns
    -------
    ProblemDetailsDict
        Payload with an ``exit-<returncode>`` instance suffix.
    """
    return build_tool_problem_details(
        TOOL_FAILURE,
        command,
        detail=detail,
        suffix=f"exit-{returncode}",
        extensions={"returncode": returncode},
    )


def settings_problem_details(
    settings_name: str, errors: Sequence[dict[str, JsonValue]]
) -> ProblemDetailsDict:
    """Return a payload listing the validation errors of ``settings_name``."""
    return build_problem_details(
        SETTINGS_INVALID,
        detail="Failed to load readiness configuration",
        instance=f"urn:settings:{settings_name}:invalid",
        extensions={"errors": list(errors), "settings_class": settings_name},
    )


def render_problem(problem: ProblemDetailsDict) -> str:
    """Render ``problem`` as compact JSON for a log field."""
    return json.dumps(problem, default=str, separators=(",", ":"))

"""Shared runtime utilities: subprocess execution, logging, settings and errors."""

from __future__ import annotations

from agent_readiness._shared.logging import (
    CorrelationContext,
    LoggerAdapter,
    get_logger,
    setup_logging,
    with_fields,
)
from agent_readiness._shared.metrics import ToolRunObservation, observe_tool_run
from agent_readiness._shared.problem_details import (
    ProblemDetailsDict,
    ProblemType,
    build_problem_details,
    build_tool_problem_details,
    render_problem,
    tool_failure_problem_details,
    tool_missing_problem_details,
    tool_timeout_problem_details,
)
from agent_readiness._shared.proc import (
    ProcessRunner,
    ToolRunner,
    ToolRunResult,
    get_process_runner,
    run_tool,
    set_process_runner,
)
from agent_readiness._shared.settings import (
    ReadinessSettings,
    SettingsError,
    get_runtime_settings,
    load_settings,
)

__all__ = [
    "CorrelationContext",
    "LoggerAdapter",
    "ProblemDetailsDict",
    "ProblemType",
    "ProcessRunner",
    "ReadinessSettings",
    "SettingsError",
    "ToolRunObservation",
    "ToolRunResult",
    "ToolRunner",
    "build_problem_details",
    "build_tool_problem_details",
    "get_logger",
    "get_process_runner",
    "get_runtime_settings",
    "load_settings",
    "observe_tool_run",
    "render_problem",
    "run_tool",
    "set_process_runner",
    "setup_logging",
    "tool_failure_problem_details",
    "tool_missing_problem_details",
    "tool_timeout_problem_details",
    "with_fields",
]

"""Typed runtime settings for readiness measurement.

Settings are read from ``AGENT_READINESS_*`` environment variables through
``pydantic_settings.BaseSettings``. Validation failures surface as
:class:`SettingsError` carrying an RFC 9457 Problem Details payload so callers
fail fast at startup with a structured explanation.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_readiness._shared.problem_details import (
    JsonValue,
    ProblemDetailsDict,
    settings_problem_details,
)

__all__: Final[list[str]] = [
    "ReadinessSettings",
    "SettingsError",
    "get_runtime_settings",
    "load_settings",
    "reset_runtime_settings",
]


class SettingsError(RuntimeError):
    """Raised when readiness settings fail validation."""

    def __init__(
        self,
        message: str,
        *,
        problem: ProblemDetailsDict,
        errors: Sequence[dict[str, JsonValue]],
    ) -> None:
        super().__init__(message)
        self.problem = problem
        self.errors: tuple[dict[str, JsonValue], ...] = tuple(errors)


_SETTINGS_CACHE: dict[str, ReadinessSettings] = {}


def load_settings[SettingsT: BaseSettings](
    settings_factory: Callable[[], SettingsT] | type[SettingsT],
) -> SettingsT:
    """Instantiate settings via ``settings_factory`` with structured error handling.

    Parameters
    ----------
    settings_factory : Callable[[], SettingsT] | type[SettingsT]
        Zero-argument callable that returns a ``BaseSettings`` instance.

    Returns
    -------
    SettingsT
        Validated settings instance.

    Raises
    ------
    SettingsError
        Raised when validation fails; the pydantic errors are carried as Problem Details.
    """
    try:
        return settings_factory()
    except ValidationError as exc:
        settings_name = str(getattr(settings_factory, "__name__", type(settings_factory).__name__))
        error_dicts: tuple[dict[str, JsonValue], ...] = tuple(
            json.loads(exc.json(include_url=False, include_input=False))
        )
        problem = settings_problem_details(settings_name, error_dicts)
        message = "Failed to load readiness settings"
        raise SettingsError(message, problem=problem, errors=error_dicts) from exc


class ReadinessSettings(BaseSettings):
    """Runtime configuration for tool execution and result persistence."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_READINESS_", case_sensitive=False, extra="ignore"
    )

    default_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied by the tool runner when the caller passes none",
    )
    type_check_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for type checker invocations",
    )
    lint_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for linter invocations",
    )
    gradle_lint_timeout_seconds: float = Field(
        default=180.0,
        gt=0,
        description="Timeout for Android Lint on Gradle projects",
    )
    coverage_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Timeout for coverage runs, which execute the full test suite",
    )
    fix_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for auto-fix tool invocations",
    )
    raw_output_limit: int = Field(
        default=1000,
        ge=0,
        description="Maximum characters of coverage tool output kept as raw diagnostics",
    )
    ratchet_filename: str = Field(
        default=".agent-readiness-score",
        description="File name of the persisted score baseline inside the project directory",
    )
    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics emitted by agent_readiness._shared.metrics",
    )

    @field_validator("ratchet_filename")
    @classmethod
    def _validate_ratchet_filename(cls, value: str) -> str:
        name = value.strip()
        if not name or Path(name).name != name:
            message = "ratchet_filename must be a bare file name"
            raise ValueError(message)
        return name


def get_runtime_settings() -> ReadinessSettings:
    """Return the cached settings instance, loading it on first use."""
    cached = _SETTINGS_CACHE.get("default")
    if cached is None:
        cached = load_settings(ReadinessSettings)
        _SETTINGS_CACHE["default"] = cached
    return cached


def reset_runtime_settings() -> None:
    """Drop the cached settings so the next lookup re-reads the environment."""
    _SETTINGS_CACHE.clear()


"""Result types produced by the metric measurers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

__all__ = [
    "SENTINEL",
    "MetricKind",
    "MetricResult",
]

type MetricKind = Literal["type_strictness", "lint_errors", "test_coverage"]

SENTINEL: Final[int] = -1
"""Metric value meaning the measurement is unavailable or could not be parsed."""


@dataclass(slots=True, frozen=True)
class MetricResult:
    """Normalised outcome of one metric measured for one language.

    ``value`` is an error count or a coverage percentage in ``[0, 100]``;
    :data:`SENTINEL` marks a failed measurement and is paired with
    ``success=False``.
    """

    metric: MetricKind
    tool: str
    value: float
    success: bool
    raw: str | None = None

    def __post_init__(self) -> None:
        if (self.value == SENTINEL) == self.success:
            message = (
                f"{self.metric} result from {self.tool} is inconsistent: "
                f"value={self.value} success={self.success}"
            )
            raise ValueError(message)

    @property
    def usable(self) -> bool:
        """Return ``True`` when the value can take part in aggregates."""
        return self.success and self.value >= 0

    @classmethod
    def failed(cls, metric: MetricKind, tool: str, raw: str | None = None) -> MetricResult:
        """Return a sentinel result for ``tool`` carrying diagnostic ``raw`` text."""
        return cls(metric=metric, tool=tool, value=SENTINEL, success=False, raw=raw)

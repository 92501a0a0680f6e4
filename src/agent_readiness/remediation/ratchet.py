"""Persisted score baseline used to reject regressions.

The baseline lives in a small JSON file in the project root::

    {"score": 84, "timestamp": "2026-01-01T00:00:00+00:00",
     "breakdown": {"typeStrictness": 30, "lintErrors": 20, "coverage": 34}}

Loading is forgiving: a missing, unreadable, malformed or mistyped file is
reported as "no baseline" (``None``) so a broken file never blocks a run.
Unknown fields are ignored. Saving always replaces the whole file.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import msgspec

from agent_readiness._shared.logging import get_logger
from agent_readiness._shared.settings import get_runtime_settings

if TYPE_CHECKING:
    from os import PathLike

    from agent_readiness.scoring import ScoreResult

__all__ = [
    "RatchetBreakdown",
    "RatchetResult",
    "RatchetState",
    "RatchetStore",
    "check_ratchet_regression",
    "load_ratchet_score",
    "save_ratchet_score",
]

LOGGER = get_logger(__name__)


class RatchetBreakdown(msgspec.Struct, frozen=True, rename="camel"):
    """Persisted per-dimension points."""

    type_strictness: int | float
    lint_errors: int | float
    coverage: int | float


class RatchetState(msgspec.Struct, frozen=True, rename="camel"):
    """Persisted baseline: score, save time and breakdown."""

    score: int | float
    timestamp: str
    breakdown: RatchetBreakdown


@dataclass(slots=True, frozen=True)
class RatchetResult:
    """Outcome of comparing a fresh score against the baseline."""

    passed: bool
    message: str
    delta: float


_DECODER = msgspec.json.Decoder(RatchetState)
_ENCODER = msgspec.json.Encoder()


def _baseline_path(directory: str | PathLike[str]) -> Path:
    return Path(directory) / get_runtime_settings().ratchet_filename


def load_ratchet_score(directory: str | PathLike[str]) -> RatchetState | None:
    """Return the persisted baseline for ``directory``, or ``None`` when absent or invalid."""
    path = _baseline_path(directory)
    try:
        content = path.read_bytes()
    except OSError:
        return None
    try:
        return _DECODER.decode(content)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        LOGGER.warning(
            "Ignoring invalid ratchet baseline",
            extra={"operation": "ratchet_load", "path": str(path), "error_detail": str(exc)},
        )
        return None


def save_ratchet_score(directory: str | PathLike[str], score: ScoreResult) -> RatchetState:
    """Overwrite the baseline for ``directory`` with ``score`` and a fresh UTC timestamp.

    Parameters
    ----------
    directory : str | PathLike[str]
        Project root holding the baseline file.
    score : ScoreResult
        Score to persist.

    Returns
    -------
    RatchetState
        The state that was written.

    Raises
    ------
    OSError
        If the file cannot be written.
    """
    state = RatchetState(
        score=score.score,
        timestamp=datetime.now(UTC).isoformat(),
        breakdown=RatchetBreakdown(
            type_strictness=score.breakdown.type_strictness,
            lint_errors=score.breakdown.lint_errors,
            coverage=score.breakdown.coverage,
        ),
    )
    path = _baseline_path(directory)
    payload = msgspec.json.format(_ENCODER.encode(state), indent=2)
    path.write_bytes(payload + b"\n")
    LOGGER.info(
        "Saved ratchet baseline",
        extra={"operation": "ratchet_save", "path": str(path), "score": state.score},
    )
    return state


def check_ratchet_regression(current: ScoreResult, baseline: RatchetState) -> RatchetResult:
    """Compare ``current`` against ``baseline``; only a lower score fails.

    A baseline of 70 against a current score of 65 fails with the message
    ``"Score regression: 65 < 70 (-5 points)"`` and ``delta == -5``.
    """
    delta = current.score - baseline.score
    if delta > 0:
        return RatchetResult(
            passed=True,
            message=f"Score improved: {current.score} (was {baseline.score}, +{delta})",
            delta=delta,
        )
    if delta == 0:
        return RatchetResult(
            passed=True, message=f"Score maintained at {current.score}", delta=delta
        )
    return RatchetResult(
        passed=False,
        message=f"Score regression: {current.score} < {baseline.score} ({delta} points)",
        delta=delta,
    )


class RatchetStore:
    """Baseline persistence bound to one project directory.

    Parameters
    ----------
    directory : str | PathLike[str]
        Project root holding the baseline file.
    """

    def __init__(self, directory: str | PathLike[str]) -> None:
        self.directory = Path(directory)

    @property
    def path(self) -> Path:
        """Location of the baseline file."""
        return _baseline_path(self.directory)

    def load(self) -> RatchetState | None:
        """Return the baseline, or ``None`` when missing or invalid."""
        return load_ratchet_score(self.directory)

    def save(self, score: ScoreResult) -> RatchetState:
        """Replace the baseline with ``score``."""
        return save_ratchet_score(self.directory, score)

    def check(self, current: ScoreResult) -> RatchetResult | None:
        """Compare ``current`` with the stored baseline; ``None`` when there is none."""
        baseline = self.load()
        if baseline is None:
            return None
        return check_ratchet_regression(current, baseline)

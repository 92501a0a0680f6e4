"""Core value types shared across readiness measurement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Literal, get_args

__all__ = [
    "SUPPORTED_LANGUAGES",
    "BuildSystem",
    "Confidence",
    "DetectedLanguage",
    "SupportedLanguage",
    "language_of",
]

type SupportedLanguage = Literal[
    "python",
    "typescript",
    "javascript",
    "go",
    "java",
    "kotlin",
    "swift",
    "ruby",
    "php",
]
type BuildSystem = Literal["gradle", "maven", "npm", "go-mod", "none"]
type Confidence = Literal["high", "medium", "low"]

SUPPORTED_LANGUAGES: Final[tuple[str, ...]] = get_args(SupportedLanguage.__value__)


@dataclass(slots=True, frozen=True)
class DetectedLanguage:
    """A language found in the project by the detection layer.

    Attributes
    ----------
    language : str
        Language identifier, one of :data:`SUPPORTED_LANGUAGES`.
    confidence : str
        Detection confidence: ``"high"``, ``"medium"`` or ``"low"``.
    markers : tuple[str, ...]
        Marker files that evidenced the language (``pyproject.toml``, ...).
    build_system : str | None
        Build system driving the language, when known.
    is_android : bool
        ``True`` for Android Gradle projects.
    """

    language: SupportedLanguage
    confidence: Confidence = "high"
    markers: tuple[str, ...] = field(default=())
    build_system: BuildSystem | None = None
    is_android: bool = False


def language_of(language: str | DetectedLanguage) -> str:
    """Return the language identifier for a bare id or a :class:`DetectedLanguage`."""
    if isinstance(language, DetectedLanguage):
        return language.language
    return language

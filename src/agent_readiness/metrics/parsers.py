"""Output-encoding family parsers for analysis tools.

Every analysis tool emits its findings in one of a handful of shapes: JSON
arrays of per-file records, flat JSON diagnostic arrays, XML reports,
line-oriented compiler text, or coverage summary tables. Each shape has one
parser here, independent of any language, registered under a family tag in
:data:`PARSER_FAMILIES`. :mod:`agent_readiness.metrics.registry` maps each
language and metric onto a family plus its extraction options.

All family parsers share one calling convention,
``parser(stdout, stderr, returncode, **options) -> float``, and one policy:

* exit status 127 (executable not found) always yields :data:`SENTINEL`;
* a clean exit with no data yields ``0``;
* structured output that does not decode as its format yields
  :data:`SENTINEL`, never ``0``;
* percentages are clamped to ``[0, 100]``.
"""

from __future__ import annotations

import functools
import math
import re
from collections.abc import Callable, Mapping
from typing import Any, Final, Protocol
from xml.etree import ElementTree

import msgspec

from agent_readiness._shared.process import EXIT_NOT_FOUND
from agent_readiness.metrics.models import SENTINEL

__all__ = [
    "PARSER_FAMILIES",
    "FamilyParser",
    "UnknownParserFamilyError",
    "clamp_percentage",
    "parse_compiler_text",
    "parse_coverage_generic",
    "parse_coverage_per_package",
    "parse_coverage_summary_table",
    "parse_coverage_total_row",
    "parse_jacoco_report",
    "parse_json_array_length",
    "parse_json_files_offenses",
    "parse_json_nested_array_sum",
    "parse_json_object_issues",
    "parse_json_record_sum",
    "parse_json_severity_count",
    "parse_json_totals_field",
    "parse_output",
    "parse_xml_element_count",
    "round_half_up",
]


class FamilyParser(Protocol):
    """Callable turning raw tool output into a count or percentage."""

    def __call__(
        self, stdout: str, stderr: str, returncode: int, /, **options: Any  # noqa: ANN401
    ) -> float: ...


class UnknownParserFamilyError(LookupError):
    """Raised when a tool profile names a family with no registered parser."""


PARSER_FAMILIES: dict[str, FamilyParser] = {}

_MISSING: Final = object()


def _family(tag: str) -> Callable[[Callable[..., float]], FamilyParser]:
    """Register a parser under ``tag`` and apply the shared exit-127 rule."""

    def decorate(func: Callable[..., float]) -> FamilyParser:
        @functools.wraps(func)
        def wrapper(
            stdout: str, stderr: str, returncode: int, /, **options: Any  # noqa: ANN401
        ) -> float:
            if returncode == EXIT_NOT_FOUND:
                return SENTINEL
            return func(stdout or "", stderr or "", returncode, **options)

        PARSER_FAMILIES[tag] = wrapper
        return wrapper

    return decorate


def parse_output(
    family: str,
    stdout: str,
    stderr: str,
    returncode: int,
    options: Mapping[str, Any] | None = None,
) -> float:
    """Dispatch to the parser registered for ``family``.

    Raises
    ------
    UnknownParserFamilyError
        If no parser is registered under ``family``.
    """
    parser = PARSER_FAMILIES.get(family)
    if parser is None:
        message = f"No parser registered for output family '{family}'"
        raise UnknownParserFamilyError(message)
    return parser(stdout, stderr, returncode, **dict(options or {}))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` with ties going up, unlike the built-in banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def clamp_percentage(value: float) -> float:
    """Clamp ``value`` into ``[0, 100]``."""
    return min(100.0, max(0.0, value))


def _as_number(value: float) -> float:
    return int(value) if float(value).is_integer() else value


def _empty_output(stdout: str, stderr: str, returncode: int) -> float | None:
    # No payload: a clean exit means nothing to report, a failing exit with an
    # explanation on stderr means the tool could not produce its report.
    if stdout.strip():
        return None
    if returncode != 0 and stderr.strip():
        return SENTINEL
    return 0


def _decode(stdout: str) -> object:
    try:
        return msgspec.json.decode(stdout.strip())
    except msgspec.DecodeError:
        return _MISSING


def _count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return int(value)


# --------------------------------------------------------------------------- #
# Structured lint reports
# --------------------------------------------------------------------------- #


@_family("json-record-sum")
def parse_json_record_sum(
    stdout: str, stderr: str, returncode: int, *, count_field: str = "errorCount"
) -> float:
    """Sum ``count_field`` over a JSON array of per-file records (ESLint)."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    records = _decode(stdout)
    if not isinstance(records, list):
        return SENTINEL
    return sum(_count(record.get(count_field)) for record in records if isinstance(record, dict))


@_family("json-array-length")
def parse_json_array_length(stdout: str, stderr: str, returncode: int) -> float:
    """Return the length of a flat JSON diagnostics array (Ruff)."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    diagnostics = _decode(stdout)
    if not isinstance(diagnostics, list):
        return SENTINEL
    return len(diagnostics)


@_family("json-object-issues")
def parse_json_object_issues(
    stdout: str, stderr: str, returncode: int, *, issues_key: str = "Issues"
) -> float:
    """Return the length of the issues array wrapped in a JSON object (golangci-lint).

    A well-formed object without the issues key reports a clean run.
    """
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    payload = _decode(stdout)
    if payload is _MISSING:
        return SENTINEL
    if isinstance(payload, dict) and isinstance(payload.get(issues_key), list):
        return len(payload[issues_key])
    return 0


_XML_DOCUMENT_START: Final = re.compile(r"<\?xml|<checkstyle[\s>]")


@_family("xml-element-count")
def parse_xml_element_count(
    stdout: str, stderr: str, returncode: int, *, element: str = "error"
) -> float:
    """Count ``element`` nodes in an XML report (Checkstyle).

    Output that holds no XML document, such as a stack trace from a tool that
    failed to start its audit, yields :data:`SENTINEL`.
    """
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    start = _XML_DOCUMENT_START.search(stdout)
    if start is None:
        return SENTINEL
    try:
        root = ElementTree.fromstring(stdout[start.start() :].strip())  # noqa: S314
    except ElementTree.ParseError:
        return SENTINEL
    return sum(1 for _ in root.iter(element))


@_family("json-severity-count")
def parse_json_severity_count(
    stdout: str, stderr: str, returncode: int, *, severity: str = "error"
) -> float:
    """Count JSON array entries whose ``severity`` matches; warnings are excluded (SwiftLint)."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    violations = _decode(stdout)
    if not isinstance(violations, list):
        return SENTINEL
    return sum(
        1
        for violation in violations
        if isinstance(violation, dict) and str(violation.get("severity", "")).lower() == severity
    )


@_family("json-nested-array-sum")
def parse_json_nested_array_sum(
    stdout: str, stderr: str, returncode: int, *, nested_key: str = "errors"
) -> float:
    """Sum nested array lengths over a JSON array of file objects (ktlint)."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    files = _decode(stdout)
    if not isinstance(files, list):
        return SENTINEL
    return sum(
        len(entry[nested_key])
        for entry in files
        if isinstance(entry, dict) and isinstance(entry.get(nested_key), list)
    )


@_family("json-files-offenses")
def parse_json_files_offenses(stdout: str, stderr: str, returncode: int) -> float:
    """Sum ``files[].offenses`` lengths (RuboCop); an absent ``files`` array is unparseable."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    payload = _decode(stdout)
    if not isinstance(payload, dict) or not isinstance(payload.get("files"), list):
        return SENTINEL
    return sum(
        len(entry["offenses"])
        for entry in payload["files"]
        if isinstance(entry, dict) and isinstance(entry.get("offenses"), list)
    )


@_family("json-totals-field")
def parse_json_totals_field(
    stdout: str, stderr: str, returncode: int, *, field: str = "errors"
) -> float:
    """Read ``totals.<field>`` from a JSON report (PHP_CodeSniffer); absent means unparseable."""
    empty = _empty_output(stdout, stderr, returncode)
    if empty is not None:
        return empty
    payload = _decode(stdout)
    if not isinstance(payload, dict):
        return SENTINEL
    totals = payload.get("totals")
    if not isinstance(totals, dict):
        return SENTINEL
    value = totals.get(field)
    if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
        return SENTINEL
    return _as_number(value)


# --------------------------------------------------------------------------- #
# Compiler and checker text
# --------------------------------------------------------------------------- #


@_family("compiler-text")
def parse_compiler_text(
    stdout: str,
    stderr: str,
    returncode: int,
    *,
    line_pattern: str,
    summary_pattern: str | None = None,
    clean_exit_is_zero: bool = True,
) -> float:
    """Count diagnostics in line-oriented compiler output.

    Parameters
    ----------
    stdout, stderr : str
        Captured streams; both are searched.
    returncode : int
        Exit status of the checker.
    line_pattern : str
        Regex matching one diagnostic; occurrences are counted.
    summary_pattern : str | None, optional
        Regex whose first group holds a total (``Found 3 errors``). It wins
        over the per-line count when present.
    clean_exit_is_zero : bool, optional
        Treat exit status 0 as zero diagnostics without reading output.
        Android Lint reports through its summary regardless of exit status,
        so its profile disables this.

    Returns
    -------
    float
        Diagnostic count, or ``0`` when nothing matched.
    """
    if clean_exit_is_zero and returncode == 0:
        return 0
    combined = f"{stdout}\n{stderr}"
    if summary_pattern is not None:
        match = re.search(summary_pattern, combined, flags=re.IGNORECASE)
        if match:
            return int(match.group(1))
    return len(re.findall(line_pattern, combined, flags=re.MULTILINE))


# --------------------------------------------------------------------------- #
# Coverage reports
# --------------------------------------------------------------------------- #


def _first_percentage(text: str, patterns: tuple[str, ...], flags: int = 0) -> float | None:
    for pattern in patterns:
        match = re.search(pattern, text, flags)
        if match is None:
            continue
        try:
            return clamp_percentage(float(match.group(1)))
        except ValueError:
            continue
    return None


@_family("coverage-summary-table")
def parse_coverage_summary_table(stdout: str, stderr: str, returncode: int) -> float:
    """Read the ``All files`` row of a c8/nyc table, else a ``coverage ...: N%`` line."""
    del stderr, returncode
    value = _first_percentage(stdout, (r"All files[^|]*\|\s*([\d.]+)",))
    if value is None:
        value = _first_percentage(
            stdout, (r"(?:total|coverage)[^:\n]*:\s*([\d.]+)%",), re.IGNORECASE
        )
    return _as_number(value) if value is not None else 0


@_family("coverage-total-row")
def parse_coverage_total_row(stdout: str, stderr: str, returncode: int) -> float:
    """Read the pytest-cov ``TOTAL`` row, else a ``total coverage: N%`` line."""
    del stderr, returncode
    value = _first_percentage(stdout, (r"^TOTAL\s+.*?(\d+(?:\.\d+)?)%",), re.MULTILINE)
    if value is None:
        value = _first_percentage(
            stdout, (r"(?:total|overall)\s+coverage[:\s]*([\d.]+)%",), re.IGNORECASE
        )
    return _as_number(value) if value is not None else 0


@_family("coverage-per-package")
def parse_coverage_per_package(stdout: str, stderr: str, returncode: int) -> float:
    """Average per-package ``coverage: N% of statements`` figures (go test).

    Packages reporting ``[no test files]`` contribute nothing; output with no
    figure at all is 0%.
    """
    del stderr, returncode
    figures = [
        float(value) for value in re.findall(r"coverage:\s*([\d.]+)%\s+of\s+statements", stdout)
    ]
    if not figures:
        figures = [float(value) for value in re.findall(r"coverage:\s*([\d.]+)%", stdout)]
    if not figures:
        return 0
    return _as_number(clamp_percentage(sum(figures) / len(figures)))


@_family("coverage-generic")
def parse_coverage_generic(stdout: str, stderr: str, returncode: int) -> float:
    """Read the first of ``coverage: N%``, ``total: N%`` or a bare ``N%`` line."""
    del stderr, returncode
    value = _first_percentage(
        stdout,
        (
            r"(?:line\s+)?coverage[:\s]*([\d.]+)%",
            r"total[:\s]*([\d.]+)%",
            r"^\s*(\d+(?:\.\d+)?)\s*%",
        ),
        re.IGNORECASE | re.MULTILINE,
    )
    return _as_number(value) if value is not None else 0


@_family("report-file")
def parse_report_file(stdout: str, stderr: str, returncode: int) -> float:
    """Family for tools whose figure is read from a report file; stdout carries none."""
    del stdout, stderr, returncode
    return 0


_JACOCO_LINE_COUNTER: Final = re.compile(
    r'<counter\s+type="LINE"\s+missed="(\d+)"\s+covered="(\d+)"\s*/>'
)


def parse_jacoco_report(xml: str) -> float:
    """Return line coverage from a JaCoCo XML report, rounded to one decimal.

    The last ``LINE`` counter is the report-level aggregate because JaCoCo
    nests method, class, package and report counters in that order.
    """
    matches = _JACOCO_LINE_COUNTER.findall(xml)
    if not matches:
        return 0
    missed, covered = (int(part) for part in matches[-1])
    total = missed + covered
    if total == 0:
        return 0
    return _as_number(round_half_up(covered / total * 100, 1))

"""Typed constructors for Prometheus metrics.

Callers obtain counters and histograms through :func:`build_counter` and
:func:`build_histogram`, typed against the small :class:`CounterLike` and
:class:`HistogramLike` protocols. Both accept an optional
:class:`~prometheus_client.registry.CollectorRegistry` so tests can isolate
their metrics from the process-wide default registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from prometheus_client import Counter, Histogram
from prometheus_client.registry import REGISTRY, CollectorRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence


class CounterLike(Protocol):
    """Subset of Prometheus counter behaviour relied on by the runner."""

    def labels(self, **kwargs: str) -> CounterLike: ...

    def inc(self, amount: float = 1.0) -> None: ...


class HistogramLike(Protocol):
    """Subset of Prometheus histogram behaviour relied on by the runner."""

    def labels(self, **kwargs: str) -> HistogramLike: ...

    def observe(self, amount: float) -> None: ...


def build_counter(
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> CounterLike:
    """Return a labelled counter registered in ``registry`` (default registry when omitted)."""
    return Counter(name, documentation, labelnames or (), registry=registry or REGISTRY)


def build_histogram(
    name: str,
    documentation: str,
    labelnames: Sequence[str] | None = None,
    *,
    buckets: Sequence[float] | None = None,
    registry: CollectorRegistry | None = None,
) -> HistogramLike:
    """Return a labelled histogram registered in ``registry`` (default registry when omitted)."""
    if buckets is None:
        return Histogram(name, documentation, labelnames or (), registry=registry or REGISTRY)
    return Histogram(
        name,
        documentation,
        labelnames or (),
        buckets=buckets,
        registry=registry or REGISTRY,
    )


__all__ = [
    "CollectorRegistry",
    "CounterLike",
    "HistogramLike",
    "build_counter",
    "build_histogram",
]

"""Assertions for read-only result objects.

Measurement results, reports, scores and persisted baselines are immutable:
dataclasses are declared ``frozen=True`` and msgspec structs ``frozen=True``,
and per-language result maps are exposed as ``MappingProxyType``. Both frozen
flavours raise a subclass of :class:`AttributeError` on assignment
(``FrozenInstanceError`` for dataclasses), which is what these helpers check.

Example
-------
>>> from tests.helpers.immutability import assert_read_only_mapping
>>> from types import MappingProxyType
>>> assert_read_only_mapping(MappingProxyType({"go": 1}), "go", 2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "assert_frozen_attribute",
    "assert_frozen_attributes",
    "assert_read_only_mapping",
]


def assert_frozen_attribute(obj: object, attr: str, value: object) -> None:
    """Assert that assigning ``value`` to ``attr`` is rejected."""
    with pytest.raises(AttributeError):
        setattr(obj, attr, value)


def assert_frozen_attributes(obj: object, **updates: object) -> None:
    """Assert that each attribute in ``updates`` rejects reassignment."""
    for name, value in updates.items():
        assert_frozen_attribute(obj, name, value)


def assert_read_only_mapping[K, V](mapping: Mapping[K, V], key: K, value: V) -> None:
    """Assert that ``mapping`` rejects both item assignment and deletion.

    Parameters
    ----------
    mapping : Mapping[K, V]
        Mapping exposed by a report.
    key : K
        Key to write and delete; it need not exist.
    value : V
        Value to attempt to store.
    """
    with pytest.raises(TypeError):
        mapping[key] = value  # type: ignore[index]
    with pytest.raises(TypeError):
        del mapping[key]  # type: ignore[attr-defined]

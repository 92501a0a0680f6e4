"""Shared test helpers for agent readiness.

Helpers defined here have no runtime side effects: immutability assertions
and scripted tool runners that stand in for real subprocesses.
"""

from __future__ import annotations

from tests.helpers.immutability import (
    assert_frozen_attribute,
    assert_frozen_attributes,
    assert_read_only_mapping,
)
from tests.helpers.runners import RecordedCall, ScriptedRunner, completed, missing, timed_out

__all__ = [
    "RecordedCall",
    "ScriptedRunner",
    "assert_frozen_attribute",
    "assert_frozen_attributes",
    "assert_read_only_mapping",
    "completed",
    "missing",
    "timed_out",
]

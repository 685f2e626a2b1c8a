"""
Threshold table and the classify helpers every probe uses.

Two directions exist: "higher is worse" (latency, disk usage, memory used)
and "lower is worse" (free memory, hit rate). Comparisons are strict, so a
value sitting exactly on a cut point stays in the better tier.
"""

from __future__ import annotations

from typing import Mapping

from ..constants import DEFAULT_THRESHOLDS
from ..exceptions import InvalidInputError
from .checks import Severity


class ThresholdTable:
    """Read-only view of DEFAULT_THRESHOLDS with optional overrides applied."""

    def __init__(self, overrides: Mapping[str, tuple[float, ...]] | None = None) -> None:
        table = dict(DEFAULT_THRESHOLDS)
        for name, values in (overrides or {}).items():
            if name not in table:
                raise InvalidInputError(f"Unknown threshold: {name}")
            if len(values) != len(table[name]):
                raise InvalidInputError(
                    f"Threshold {name} expects {len(table[name])} value(s), got {len(values)}"
                )
            table[name] = tuple(values)
        self._table = table

    def __getitem__(self, name: str) -> tuple[float, ...]:
        return self._table[name]

    def single(self, name: str) -> float:
        return self._table[name][0]

    def pair(self, name: str) -> tuple[float, float]:
        first, second = self._table[name]
        return first, second


def classify_above(value: float, warning: float, error: float) -> Severity:
    """Higher is worse: > error is ERROR, > warning is WARNING."""
    if value > error:
        return Severity.ERROR
    if value > warning:
        return Severity.WARNING
    return Severity.SUCCESS


def classify_below(value: float, error: float, warning: float) -> Severity:
    """Lower is worse: < error is ERROR, < warning is WARNING."""
    if value < error:
        return Severity.ERROR
    if value < warning:
        return Severity.WARNING
    return Severity.SUCCESS


def classify_disk_usage(percent: float, warning: float = 80, error: float = 90) -> Severity:
    return classify_above(percent, warning, error)


def classify_directory_size(size_mb: float, threshold_mb: float) -> Severity:
    """Above the threshold warns; above double the threshold fails."""
    return classify_above(size_mb, threshold_mb, threshold_mb * 2)

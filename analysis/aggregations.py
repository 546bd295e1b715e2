"""Aggregation helpers for the transformation engine.

This module provides deterministic, reusable aggregation functions used by the
chart builders without introducing Django dependencies.

Only numeric cells participate in an aggregate. Strings, booleans, and nulls
are skipped, and a column with no numeric cells aggregates to `0.0`.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import StrEnum

from .dto import Scalar, is_number


class AggregationFunction(StrEnum):
    """Reduction applied to the values of one field within a group."""

    SUM = "Sum"
    AVG = "Avg"
    COUNT = "Count"
    MIN = "Min"
    MAX = "Max"
    MEDIAN = "Median"
    NONE = "None"

    @property
    def display_name(self) -> str:
        """Upper-case label shown in the UI (e.g. `SUM`)."""

        return self.value.upper()

    @classmethod
    def default(cls) -> "AggregationFunction":
        """Return the default aggregation (`Sum`)."""

        return cls.SUM


def numeric_values(rows: Sequence[Sequence[Scalar]], index: int) -> list[float]:
    """Collect the numeric cells at `index`, skipping short rows and non-numbers.

    Args:
        rows: Data rows.
        index: Column index to read.

    Returns:
        Numeric cell values as floats, in row order.
    """

    values: list[float] = []
    for row in rows:
        if index >= len(row):
            continue
        value = row[index]
        if is_number(value):
            values.append(float(value))  # type: ignore[arg-type]
    return values


def apply_aggregation(values: Sequence[float], function: AggregationFunction) -> float:
    """Reduce a list of numbers with the given aggregation.

    Args:
        values: Numeric values; may be empty.
        function: Aggregation to apply.

    Returns:
        The aggregated value. Empty input yields `0.0`.
    """

    if not values:
        return 0.0

    if function == AggregationFunction.SUM:
        return float(sum(values))
    if function == AggregationFunction.AVG:
        return sum(values) / len(values)
    if function == AggregationFunction.COUNT:
        return float(len(values))
    if function == AggregationFunction.MIN:
        result = math.inf
        for value in values:
            result = min(result, value)
        return result
    if function == AggregationFunction.MAX:
        result = -math.inf
        for value in values:
            result = max(result, value)
        return result
    if function == AggregationFunction.MEDIAN:
        ordered = sorted(values)
        mid = len(ordered) // 2
        if len(ordered) % 2 == 0:
            return (ordered[mid - 1] + ordered[mid]) / 2.0
        return ordered[mid]
    # NONE: raw value, no reduction.
    return values[0]


def aggregate_data(
    data: Sequence[Sequence[Scalar]],
    field_indices: Sequence[int],
    function: AggregationFunction = AggregationFunction.SUM,
) -> list[float]:
    """Aggregate each requested column across all rows.

    Args:
        data: Data rows.
        field_indices: Column indices to aggregate, in output order.
        function: Aggregation applied to every column.

    Returns:
        One aggregated value per index, or an empty list when either input is
        empty.
    """

    if not field_indices or not data:
        return []
    return [apply_aggregation(numeric_values(data, idx), function) for idx in field_indices]

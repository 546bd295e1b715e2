"""Grouped tabular transform from a Dataset into chart `dataset.source` rows.

The output is a header row followed by one row per distinct x-axis value.
Rows are grouped by the canonical JSON encoding of the x cell, so `1.0` and
`"1"` land in different groups while repeated `"Jan"` cells merge.

Ordering:
- groups are created in first-seen order,
- data rows are then stably sorted by x value (string vs string and number vs
  number compare naturally; any other pairing compares equal),
- the header row always stays first.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Literal

from .aggregations import AggregationFunction, apply_aggregation, numeric_values
from .dto import DataMapping, Dataset, Field, FieldType, Row, Scalar, is_number

TransformErrorKind = Literal["field_not_found", "invalid_field_type", "transformation_failed"]


@dataclass(frozen=True, slots=True)
class TransformError:
    """A typed transformation failure.

    Args:
        kind: Failure category.
        detail: Field name or free-form detail.
        expected: Expected field type for `invalid_field_type`.
        found: Actual field type for `invalid_field_type`.
    """

    kind: TransformErrorKind
    detail: str
    expected: FieldType | None = None
    found: FieldType | None = None

    @property
    def message(self) -> str:
        """Human-readable message."""

        if self.kind == "field_not_found":
            return f"Field not found: {self.detail}"
        if self.kind == "invalid_field_type":
            return f"Field '{self.detail}' has invalid type: expected {self.expected}, found {self.found}"
        return f"Transformation failed: {self.detail}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Rows produced by `dataset_to_echarts_format`, or the error that stopped it."""

    rows: tuple[Row, ...] = ()
    error: TransformError | None = None

    @property
    def ok(self) -> bool:
        """Return True when the transform succeeded."""

        return self.error is None


@dataclass(frozen=True, slots=True)
class IndexResult:
    """Resolved field index (or indices), or a TransformError."""

    indices: tuple[int, ...] = ()
    error: TransformError | None = None

    @property
    def index(self) -> int:
        """First resolved index; only meaningful when `error` is None."""

        return self.indices[0]


def find_field_index(fields: Sequence[Field], name: str | None) -> IndexResult:
    """Resolve a single field name to its column index.

    Args:
        fields: Dataset fields.
        name: Field name, or None when the role is unmapped.

    Returns:
        IndexResult with one index, or a `field_not_found` error.
    """

    if name is None:
        return IndexResult(error=TransformError("field_not_found", "No field specified"))
    for idx, field in enumerate(fields):
        if field.name == name:
            return IndexResult(indices=(idx,))
    return IndexResult(error=TransformError("field_not_found", name))


def find_field_indexes(fields: Sequence[Field], names: Sequence[str]) -> IndexResult:
    """Resolve several field names, failing on the first unknown one."""

    indices: list[int] = []
    for name in names:
        resolved = find_field_index(fields, name)
        if resolved.error is not None:
            return resolved
        indices.append(resolved.index)
    return IndexResult(indices=tuple(indices))


def compare_x_values(a: Scalar, b: Scalar) -> int:
    """Three-way comparison for x-axis cells; mixed kinds compare equal."""

    if isinstance(a, str) and isinstance(b, str):
        return (a > b) - (a < b)
    if is_number(a) and is_number(b):
        return (a > b) - (a < b)  # type: ignore[operator]
    return 0


def group_rows(rows: Sequence[Sequence[Scalar]], x_index: int) -> dict[str, list[Sequence[Scalar]]]:
    """Group rows by the canonical JSON encoding of their x cell.

    Rows too short to have an x cell are dropped.
    """

    grouped: dict[str, list[Sequence[Scalar]]] = {}
    for row in rows:
        if x_index >= len(row):
            continue
        key = json.dumps(row[x_index])
        grouped.setdefault(key, []).append(row)
    return grouped


def dataset_to_echarts_format(
    dataset: Dataset,
    mapping: DataMapping,
    aggregation: AggregationFunction = AggregationFunction.SUM,
) -> TransformResult:
    """Group and aggregate a dataset into header + data rows.

    Args:
        dataset: Source dataset.
        mapping: Field mapping; `x_axis` and `y_axis` are used.
        aggregation: Aggregation applied per group and y field.

    Returns:
        TransformResult with `[header, *data_rows]`, or a TransformError.
    """

    x_resolved = find_field_index(dataset.fields, mapping.x_axis)
    if x_resolved.error is not None:
        return TransformResult(error=x_resolved.error)
    y_resolved = find_field_indexes(dataset.fields, mapping.y_axis)
    if y_resolved.error is not None:
        return TransformResult(error=y_resolved.error)
    if not y_resolved.indices:
        return TransformResult(error=TransformError("field_not_found", "No Y-axis fields specified"))

    x_idx = x_resolved.index
    header: Row = [dataset.fields[x_idx].name]
    header.extend(dataset.fields[idx].name for idx in y_resolved.indices)

    data_rows: list[Row] = []
    for key, rows in group_rows(dataset.data, x_idx).items():
        data_row: Row = [json.loads(key)]
        for y_idx in y_resolved.indices:
            data_row.append(apply_aggregation(numeric_values(rows, y_idx), aggregation))
        data_rows.append(data_row)

    data_rows.sort(key=cmp_to_key(lambda a, b: compare_x_values(a[0], b[0])))
    return TransformResult(rows=(header, *data_rows))

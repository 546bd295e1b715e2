"""KPI aggregation for single-value dashboard widgets."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from .dto import Dataset, Field, FieldType, is_number
from .type_inference import parse_float


class KpiAggregation(StrEnum):
    """Reduction used to turn a column into one KPI value."""

    SUM = "Sum"
    AVERAGE = "Average"
    COUNT = "Count"
    MIN = "Min"
    MAX = "Max"
    LAST = "Last"
    FIRST = "First"


@dataclass(frozen=True, slots=True)
class KpiValue:
    """A computed KPI value.

    Attributes:
        value: Raw aggregated number.
        formatted: Display string for the KPI card.
        aggregation: Aggregation that produced the value.
    """

    value: float
    formatted: str
    aggregation: KpiAggregation


def calculate_kpi(dataset: Dataset, field_name: str, aggregation: KpiAggregation) -> KpiValue | None:
    """Aggregate one dataset column into a KPI value.

    Unlike chart aggregation, numeric strings are parsed here so KPI cards
    work on columns that were stored as text.

    Args:
        dataset: Source dataset.
        field_name: Column to aggregate.
        aggregation: Reduction to apply.

    Returns:
        KpiValue, or None when the field is unknown or has no numeric values.
    """

    index = next((i for i, f in enumerate(dataset.fields) if f.name == field_name), None)
    if index is None:
        return None
    field = dataset.fields[index]

    values: list[float] = []
    for row in dataset.data:
        if index >= len(row):
            continue
        cell = row[index]
        if is_number(cell):
            values.append(float(cell))  # type: ignore[arg-type]
        elif isinstance(cell, str):
            parsed = parse_float(cell)
            if parsed is not None:
                values.append(parsed)
    if not values:
        return None

    if aggregation == KpiAggregation.COUNT:
        count = float(len(values))
        return KpiValue(value=count, formatted=f"{count:.0f}", aggregation=aggregation)

    if aggregation == KpiAggregation.SUM:
        value = sum(values)
    elif aggregation == KpiAggregation.AVERAGE:
        value = sum(values) / len(values)
    elif aggregation == KpiAggregation.MIN:
        value = min(values)
    elif aggregation == KpiAggregation.MAX:
        value = max(values)
    elif aggregation == KpiAggregation.LAST:
        value = values[-1]
    else:
        value = values[0]
    return KpiValue(value=value, formatted=format_kpi_value(value, field), aggregation=aggregation)


def format_kpi_value(value: float, field: Field) -> str:
    """Format a KPI number according to the column type.

    Numeric columns use thousands separators below one million, `M`/`B`
    suffixes at or above it, and two decimals for fractional values.
    """

    if field.field_type == FieldType.NUMERIC:
        if math.isfinite(value) and value == int(value) and abs(value) < 1_000_000.0:
            return format_with_commas(value)
        if abs(value) >= 1_000_000.0:
            return format_large_number(value)
        return f"{value:.2f}"
    if field.field_type == FieldType.DATE:
        return "Date"
    return f"{value:.0f}"


def format_with_commas(value: float) -> str:
    """Round to an integer and insert thousands separators."""

    return f"{value:,.0f}"


def format_large_number(value: float) -> str:
    """Abbreviate with K/M/B suffixes (one decimal)."""

    magnitude = abs(value)
    if magnitude >= 1_000_000_000.0:
        return f"{value / 1_000_000_000.0:.1f}B"
    if magnitude >= 1_000_000.0:
        return f"{value / 1_000_000.0:.1f}M"
    if magnitude >= 1_000.0:
        return f"{value / 1_000.0:.1f}K"
    return format_with_commas(value)


def suggest_aggregations(field: Field) -> list[tuple[KpiAggregation, str]]:
    """Suggest KPI aggregations and labels for a field."""

    if field.field_type == FieldType.NUMERIC:
        return [
            (KpiAggregation.SUM, f"Total {field.name}"),
            (KpiAggregation.AVERAGE, f"Average {field.name}"),
            (KpiAggregation.MIN, f"Min {field.name}"),
            (KpiAggregation.MAX, f"Max {field.name}"),
        ]
    if field.field_type == FieldType.TEXT:
        return [(KpiAggregation.COUNT, f"Count of {field.name}")]
    return []


def analyze_dataset_for_kpis(dataset: Dataset) -> list[tuple[str, list[tuple[KpiAggregation, str]]]]:
    """Return KPI suggestions for every numeric or text field."""

    return [
        (field.name, suggest_aggregations(field))
        for field in dataset.fields
        if field.field_type in (FieldType.NUMERIC, FieldType.TEXT)
    ]

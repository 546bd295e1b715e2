"""Payloads for widgets rendered without the chart engine (KPI cards, tables)."""

from __future__ import annotations

from typing import Any

from analysis.dto import DataMapping, Dataset, Scalar
from analysis.kpi import KpiAggregation, calculate_kpi
from core.charting.styles import KpiStyleOptions, KpiValueFormat, TableStyleOptions

NO_DATA = "No data"
NULL_CELL = "—"


def kpi_aggregation(mapping: DataMapping) -> KpiAggregation:
    """Return the mapped KPI aggregation, falling back to Sum."""

    try:
        return KpiAggregation(mapping.kpi_aggregation or KpiAggregation.SUM)
    except ValueError:
        return KpiAggregation.SUM


def build_kpi_payload(dataset: Dataset, mapping: DataMapping, style: KpiStyleOptions) -> dict[str, Any]:
    """Compute the value shown on a KPI card.

    The KPI field is `kpi_field`, or the first y-axis field when unset.

    Returns:
        Dict with `field`, `aggregation`, `value` (None without data) and
        `display` (the formatted card text).
    """

    field_name = mapping.kpi_field or (mapping.y_axis[0] if mapping.y_axis else None)
    aggregation = kpi_aggregation(mapping)
    kpi = calculate_kpi(dataset, field_name, aggregation) if field_name else None

    if kpi is None:
        display = NO_DATA
    elif style.value_format == KpiValueFormat.CURRENCY:
        display = f"${kpi.formatted}"
    elif style.value_format == KpiValueFormat.PERCENTAGE:
        display = f"{kpi.formatted}%"
    else:
        display = kpi.formatted

    return {
        "field": field_name,
        "aggregation": str(aggregation),
        "value": kpi.value if kpi is not None else None,
        "display": display,
        "show_trend": style.show_trend,
        "show_comparison": style.show_comparison,
    }


def format_table_cell(value: Scalar) -> str:
    """Render a cell for table display."""

    if value is None:
        return NULL_CELL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_table_payload(dataset: Dataset, mapping: DataMapping, style: TableStyleOptions) -> dict[str, Any]:
    """Project the dataset onto the mapped columns.

    Unknown column names are dropped; with no usable columns every field is
    shown. Rows are paginated when `show_pagination` is set.
    """

    names = dataset.field_names()
    columns = [name for name in mapping.columns if name in names] or names
    indices = [names.index(name) for name in columns]

    rows = [
        [format_table_cell(row[i] if i < len(row) else None) for i in indices]
        for row in dataset.data
    ]
    payload: dict[str, Any] = {
        "columns": columns,
        "rows": rows,
        "total_rows": len(rows),
        "striped": style.striped,
        "hover": style.hover,
        "sortable": style.show_sorting,
        "row_height": str(style.row_height),
        "show_borders": style.show_borders,
    }
    if style.show_pagination:
        payload["page_size"] = style.page_size
        payload["rows"] = rows[: style.page_size]
    return payload

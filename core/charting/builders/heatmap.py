"""Heatmap builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction, apply_aggregation
from analysis.dto import DataMapping, Dataset, FieldType, is_number
from analysis.transform import find_field_index
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, cell_label, transform_error
from core.charting.schema import ConfigError, FieldRequirement, SingleField, WidgetType, missing
from core.charting.styles import HeatmapStyleOptions
from core.charting.theme import ChartColors

DEFAULT_COLOR_MIN = "#313695"
DEFAULT_COLOR_MAX = "#a50026"
# Visual map range used when no cell carries a value.
EMPTY_RANGE = (0.0, 10.0)


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("X-Axis", FieldType.TEXT),
        SingleField("Y-Axis Category", FieldType.TEXT),
        SingleField("Value", FieldType.NUMERIC),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("X-axis field is required for heatmaps")
    if not mapping.category:
        return missing("Category field is required for Y-axis grouping")
    if not mapping.y_axis:
        return missing("Value field is required for heatmaps")
    return None


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: HeatmapStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Bin rows into an x-category by y-category grid.

    Categories appear in first-seen order. Rows landing in the same cell are
    combined with `aggregation`; each cell is emitted as `[x_index, y_index,
    value]`.
    """

    indices: list[int] = []
    for name in (mapping.x_axis, mapping.category, mapping.y_axis[0]):
        resolved = find_field_index(dataset.fields, name)
        if resolved.error is not None:
            return OptionsResult(error=transform_error(resolved.error))
        indices.append(resolved.index)
    x_index, y_index, value_index = indices

    x_labels: dict[str, int] = {}
    y_labels: dict[str, int] = {}
    cells: dict[tuple[int, int], list[float]] = {}
    for row in dataset.data:
        if max(indices) >= len(row):
            continue
        xi = x_labels.setdefault(cell_label(row[x_index]), len(x_labels))
        yi = y_labels.setdefault(cell_label(row[y_index]), len(y_labels))
        bucket = cells.setdefault((xi, yi), [])
        value = row[value_index]
        if is_number(value):
            bucket.append(float(value))  # type: ignore[arg-type]

    data = [[xi, yi, apply_aggregation(values, aggregation)] for (xi, yi), values in cells.items()]
    observed = [cell[2] for cell in data]
    low, high = (min(observed), max(observed)) if observed else EMPTY_RANGE

    series: dict[str, Any] = {
        "type": "heatmap",
        "name": mapping.y_axis[0],
        "data": data,
        "label": {"show": style.show_values or style.show_labels, "color": theme.label_high_contrast},
        "itemStyle": {
            "borderRadius": style.border_radius,
            "borderColor": theme.background,
            "borderWidth": style.gap,
        },
        "emphasis": {"itemStyle": {"shadowBlur": 10, "shadowColor": "rgba(0, 0, 0, 0.5)"}},
        **chrome.animation(style.animation, style.animation_duration),
    }

    x_axis = chrome.axis(theme, axis_type="category", split_lines=False)
    x_axis["data"] = list(x_labels)
    x_axis["splitArea"] = {"show": True}
    y_axis = chrome.axis(theme, axis_type="category", split_lines=False)
    y_axis["data"] = list(y_labels)
    y_axis["splitArea"] = {"show": True}

    has_title = style.title is not None
    document: dict[str, Any] = {
        "xAxis": x_axis,
        "yAxis": y_axis,
        "series": [series],
        "visualMap": {
            "min": low,
            "max": high,
            "calculable": style.interactive,
            "orient": "horizontal",
            "left": "center",
            "bottom": "5%",
            "inRange": {"color": [style.color_min or DEFAULT_COLOR_MIN, style.color_max or DEFAULT_COLOR_MAX]},
            "textStyle": {"color": theme.text},
        },
        "tooltip": chrome.tooltip(theme, trigger="item"),
        "grid": {"height": "70%", "top": "15%" if has_title else "10%", "containLabel": True},
    }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.HEATMAP,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

"""Scatter and bubble chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType, Scalar, is_number
from analysis.transform import find_field_index
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, transform_error
from core.charting.schema import ConfigError, FieldRequirement, SingleField, WidgetType, missing
from core.charting.styles import ScatterStyleOptions
from core.charting.theme import ChartColors, lighten_color


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("X-Axis", FieldType.NUMERIC),
        SingleField("Y-Axis", FieldType.NUMERIC),
        SingleField("Size (Optional)", FieldType.NUMERIC, required=False),
        SingleField("Color (Optional)", FieldType.TEXT, required=False),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("X-axis field is required for scatter plots")
    if not mapping.y_axis:
        return missing("Y-axis field is required for scatter plots")
    return None


def _optional_index(dataset: Dataset, name: str | None) -> tuple[int | None, ConfigError | None]:
    if name is None:
        return None, None
    resolved = find_field_index(dataset.fields, name)
    if resolved.error is not None:
        return None, transform_error(resolved.error)
    return resolved.index, None


def _cell(row: list[Scalar], index: int) -> Scalar:
    return row[index] if index < len(row) else None


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: ScatterStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Plot one point per row as `[x, y, size?, color?]`.

    Rows whose x or y cell is not numeric are skipped. When a size field is
    mapped, a hidden visual map scales symbols between `point_size_min` and
    `point_size_max`.
    """

    roles = (mapping.x_axis, mapping.y_axis[0], mapping.size, mapping.color)
    indices: list[int | None] = []
    for name in roles:
        index, error = _optional_index(dataset, name)
        if error is not None:
            return OptionsResult(error=error)
        indices.append(index)
    x_index, y_index, size_index, color_index = indices
    assert x_index is not None and y_index is not None

    points: list[list[Scalar]] = []
    sizes: list[float] = []
    for row in dataset.data:
        x_value, y_value = _cell(row, x_index), _cell(row, y_index)
        if not (is_number(x_value) and is_number(y_value)):
            continue
        point: list[Scalar] = [x_value, y_value]
        if size_index is not None:
            size_value = _cell(row, size_index)
            size = float(size_value) if is_number(size_value) else 0.0  # type: ignore[arg-type]
            sizes.append(size)
            point.append(size)
        if color_index is not None:
            point.append(_cell(row, color_index))
        points.append(point)

    series: dict[str, Any] = {
        "type": "scatter",
        "name": mapping.y_axis[0],
        "data": points,
        "symbolSize": style.point_size_min if size_index is not None else style.point_size,
        "itemStyle": {"color": theme.primary, "opacity": style.opacity / 100.0},
        "emphasis": {
            "focus": "self",
            "itemStyle": {
                "color": lighten_color(theme.primary, 0.3),
                "borderColor": theme.label_high_contrast,
                "borderWidth": 2,
            },
            "label": {"show": True, "fontSize": 12, "fontWeight": "bold", "color": theme.label_high_contrast},
        },
        "blur": chrome.series_blur(0.3),
        **chrome.animation(style.animation, style.animation_duration),
    }
    if style.show_labels:
        series["label"] = chrome.value_label(theme, position="top", font_size=10)

    has_title = style.title is not None
    x_axis = chrome.axis(theme, axis_type="value", split_lines=True)
    y_axis = chrome.axis(theme, axis_type="value", split_lines=True)
    document: dict[str, Any] = {
        "xAxis": chrome.name_axis(x_axis, style.x_axis_title, theme, vertical=False),
        "yAxis": chrome.name_axis(y_axis, style.y_axis_title, theme, vertical=True),
        "series": [series],
        "tooltip": chrome.tooltip(theme, trigger="item"),
        "legend": chrome.legend(theme, has_title=has_title),
        "grid": chrome.grid(
            has_title=has_title,
            has_x_title=style.x_axis_title is not None,
            has_y_title=style.y_axis_title is not None,
            top_with_title="15%",
            top_without_title="10%",
        ),
    }
    if size_index is not None:
        document["visualMap"] = {
            "show": False,
            "dimension": 2,
            "min": min(sizes, default=0.0),
            "max": max(sizes, default=0.0),
            "inRange": {"symbolSize": [style.point_size_min, style.point_size_max]},
        }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.SCATTER,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

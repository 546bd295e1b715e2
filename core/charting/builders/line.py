"""Line chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, tabular_source
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, SingleField, WidgetType, missing
from core.charting.styles import LineStyleOptions
from core.charting.theme import ChartColors, apply_opacity


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("X-Axis", FieldType.TEXT),
        MultipleFields("Y-Axis", (FieldType.NUMERIC,), min_count=1, max_count=3),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("X-axis field is required for line charts")
    if not mapping.y_axis:
        return missing("At least one Y-axis field is required for line charts")
    return None


def _area_style(color: str, index: int, style: LineStyleOptions) -> dict[str, Any]:
    if style.enable_patterns:
        return {"color": apply_opacity(color, 0.3), "decal": chrome.decal(index)}
    return {"color": chrome.linear_gradient(color, 0.4, 0.05)}


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: LineStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Assemble a multi-series line chart over the grouped x/y table.

    Only the first series receives an area fill so overlapping fills never
    hide the lines beneath them.
    """

    table = tabular_source(dataset, mapping, aggregation)
    if table.error is not None:
        return OptionsResult(error=table.error)

    x_name = table.rows[0][0]
    series: list[dict[str, Any]] = []
    for index, y_name in enumerate(mapping.y_axis):
        color = chrome.palette_color(theme, index)
        entry: dict[str, Any] = {
            "type": "line",
            "name": y_name,
            "encode": {"x": x_name, "y": y_name},
            "smooth": style.smooth,
            "lineStyle": {"width": style.line_width, "color": color},
            "itemStyle": {"color": color},
            "emphasis": chrome.series_emphasis(color, theme, line_width=style.line_width),
            "blur": chrome.series_blur(0.3, line=True),
            "showSymbol": style.show_points,
            "symbolSize": style.point_size,
            **chrome.animation(style.animation, style.animation_duration),
        }
        if style.area_fill and index == 0:
            entry["areaStyle"] = _area_style(color, index, style)
        if style.show_labels:
            entry["label"] = chrome.value_label(theme)
        series.append(entry)

    has_title = style.title is not None
    x_axis = chrome.axis(theme, axis_type="category", split_lines=False, boundary_gap=False)
    y_axis = chrome.axis(theme, axis_type="value", split_lines=True)
    document: dict[str, Any] = {
        "dataset": {"source": [list(row) for row in table.rows]},
        "xAxis": chrome.name_axis(x_axis, style.x_axis_title, theme, vertical=False),
        "yAxis": chrome.name_axis(y_axis, style.y_axis_title, theme, vertical=True),
        "series": series,
        "tooltip": chrome.tooltip(theme),
        "legend": chrome.legend(theme, has_title=has_title),
        "grid": chrome.grid(
            has_title=has_title,
            has_x_title=style.x_axis_title is not None,
            has_y_title=style.y_axis_title is not None,
        ),
    }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.LINE,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

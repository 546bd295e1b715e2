"""Area chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, tabular_source
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, SingleField, WidgetType, missing
from core.charting.styles import AreaStyleOptions
from core.charting.theme import ChartColors


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("X-Axis", FieldType.TEXT),
        MultipleFields("Y-Axis", (FieldType.NUMERIC,), min_count=1, max_count=5),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("X-axis field is required for area charts")
    if not mapping.y_axis:
        return missing("At least one Y-axis field is required for area charts")
    return None


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: AreaStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Assemble filled line series; `opacity` is a 0-100 percentage."""

    table = tabular_source(dataset, mapping, aggregation)
    if table.error is not None:
        return OptionsResult(error=table.error)

    x_name = table.rows[0][0]
    fill_opacity = style.opacity / 100.0
    border_width = style.border_width if style.show_border else 0
    series: list[dict[str, Any]] = []
    for index, y_name in enumerate(mapping.y_axis):
        color = chrome.palette_color(theme, index)
        entry: dict[str, Any] = {
            "type": "line",
            "name": y_name,
            "encode": {"x": x_name, "y": y_name},
            "smooth": style.smooth,
            "lineStyle": {"width": border_width, "color": color},
            "areaStyle": {"color": chrome.linear_gradient(color, fill_opacity, fill_opacity * 0.2)},
            "itemStyle": {"color": color},
            "emphasis": chrome.series_emphasis(color, theme, line_width=border_width),
            "blur": chrome.series_blur(0.2, line=True, area_opacity=0.1),
            "showSymbol": style.show_points,
            "symbol": "circle" if style.show_points else "none",
            "symbolSize": style.point_size,
            **chrome.animation(style.animation, style.animation_duration),
        }
        if style.stacked:
            entry["stack"] = "total"
        series.append(entry)

    document: dict[str, Any] = {
        "dataset": {"source": [list(row) for row in table.rows]},
        "xAxis": chrome.axis(theme, axis_type="category", split_lines=False, boundary_gap=False),
        "yAxis": chrome.axis(theme, axis_type="value", split_lines=True),
        "series": series,
        "tooltip": chrome.tooltip(theme),
        "legend": chrome.legend(theme, has_title=False),
        "grid": chrome.grid(has_title=False),
    }
    return OptionsResult(options=document)


BUILDER = WidgetBuilder(
    widget_type=WidgetType.AREA,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

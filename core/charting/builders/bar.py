"""Bar chart builder (vertical or horizontal, grouped or stacked)."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, tabular_source
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, SingleField, WidgetType, missing
from core.charting.styles import BarStyleOptions
from core.charting.theme import ChartColors


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("X-Axis", FieldType.TEXT),
        MultipleFields("Y-Axis", (FieldType.NUMERIC,), min_count=1, max_count=3),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("X-axis field is required for bar charts")
    if not mapping.y_axis:
        return missing("At least one Y-axis field is required for bar charts")
    return None


def _item_style(color: str, index: int, style: BarStyleOptions) -> dict[str, Any]:
    radius = style.border_radius
    item: dict[str, Any] = {
        "color": color,
        "borderRadius": [0, radius, radius, 0] if style.horizontal else [0, 0, radius, radius],
    }
    if style.enable_patterns:
        item["decal"] = chrome.decal(index)
    return item


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: BarStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Assemble a bar chart; `horizontal` swaps the category and value axes."""

    table = tabular_source(dataset, mapping, aggregation)
    if table.error is not None:
        return OptionsResult(error=table.error)

    x_name = table.rows[0][0]
    series: list[dict[str, Any]] = []
    for index, y_name in enumerate(mapping.y_axis):
        color = chrome.palette_color(theme, index)
        entry: dict[str, Any] = {
            "type": "bar",
            "name": y_name,
            "encode": {"x": y_name, "y": x_name} if style.horizontal else {"x": x_name, "y": y_name},
            "itemStyle": _item_style(color, index, style),
            "emphasis": chrome.series_emphasis(color, theme),
            "blur": chrome.series_blur(0.3),
            **chrome.animation(style.animation, style.animation_duration),
        }
        if style.stacked:
            entry["stack"] = "total"
        if style.horizontal:
            entry["barMinWidth"] = 0
        else:
            entry["barMaxWidth"] = style.bar_width
        if style.show_labels:
            entry["label"] = chrome.value_label(theme, position="right" if style.horizontal else "top")
        series.append(entry)

    x_axis = chrome.axis(
        theme,
        axis_type="value" if style.horizontal else "category",
        split_lines=style.horizontal,
        boundary_gap=not style.horizontal,
    )
    y_axis = chrome.axis(
        theme,
        axis_type="category" if style.horizontal else "value",
        split_lines=not style.horizontal,
    )

    has_title = style.title is not None
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
    widget_type=WidgetType.BAR,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

"""Pie and donut chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, cell_label, tabular_source
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, SingleField, WidgetType, missing
from core.charting.styles import PieStyleOptions
from core.charting.theme import ChartColors


def required_fields() -> list[FieldRequirement]:
    return [
        SingleField("Labels", FieldType.TEXT),
        MultipleFields("Values", (FieldType.NUMERIC,), min_count=1, max_count=1),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.y_axis:
        return missing("At least one measure field is required for pie charts")
    return None


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: PieStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Assemble one pie series from the first measure.

    Slices come from the same grouped transform as line and bar charts, so
    repeated labels are merged. Stacking has no meaning here.
    """

    table = tabular_source(dataset, mapping, aggregation)
    if table.error is not None:
        return OptionsResult(error=table.error)

    measure = mapping.y_axis[0]
    slices: list[dict[str, Any]] = []
    for index, row in enumerate(table.rows[1:]):
        item: dict[str, Any] = {"name": cell_label(row[0]), "value": row[1]}
        if style.enable_patterns:
            item["itemStyle"] = {"decal": chrome.decal(index)}
        slices.append(item)

    outside = style.label_position == "outside"
    series: dict[str, Any] = {
        "type": "pie",
        "name": measure,
        "radius": [style.inner_radius, "100%"],
        "center": ["50%", "50%"],
        "roseType": "area" if style.rose_type else False,
        "data": slices,
        "itemStyle": {
            "borderRadius": style.border_radius,
            "borderColor": theme.background,
            "borderWidth": 2,
        },
        "label": {
            "show": style.show_labels,
            "position": style.label_position,
            "fontSize": 11,
            "color": theme.text,
            "formatter": "{b}: {d}%",
        },
        "labelLine": {"show": style.show_labels and outside, "lineStyle": {"color": theme.grid}},
        "emphasis": {
            "focus": "self",
            "scaleSize": 10,
            "itemStyle": {
                "shadowBlur": 10,
                "shadowOffsetX": 0,
                "shadowColor": "rgba(0, 0, 0, 0.5)",
                "borderColor": theme.label_high_contrast,
                "borderWidth": 3,
            },
            "label": {"show": True, "fontSize": 14, "fontWeight": "bold", "color": theme.label_high_contrast},
        },
        "blur": {"itemStyle": {"opacity": 0.4}, "label": {"opacity": 0.4}},
        **chrome.animation(style.animation, style.animation_duration),
    }

    has_title = style.title is not None
    legend = chrome.legend(theme, has_title=has_title)
    legend["type"] = "scroll"
    document: dict[str, Any] = {
        "color": theme.to_palette(),
        "series": [series],
        "tooltip": chrome.tooltip(theme, trigger="item", formatter="{a} <br/>{b}: {c} ({d}%)"),
        "legend": legend,
    }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.PIE,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

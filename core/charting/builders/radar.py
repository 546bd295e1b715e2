"""Radar chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType, is_number
from analysis.transform import find_field_indexes
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, transform_error
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, WidgetType, missing
from core.charting.styles import RadarStyleOptions
from core.charting.theme import ChartColors, apply_opacity

MIN_INDICATORS = 3
MAX_INDICATORS = 8


def required_fields() -> list[FieldRequirement]:
    return [
        MultipleFields(
            "Indicators",
            (FieldType.NUMERIC,),
            min_count=MIN_INDICATORS,
            max_count=MAX_INDICATORS,
        )
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if len(mapping.y_axis) < MIN_INDICATORS:
        return missing(f"At least {MIN_INDICATORS} indicator fields are required for radar charts")
    if len(mapping.y_axis) > MAX_INDICATORS:
        return ConfigError("invalid_value", f"Radar charts support at most {MAX_INDICATORS} indicators")
    return None


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: RadarStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Plot the first data row's indicator values.

    Radar charts do not aggregate; `aggregation` is accepted for the uniform
    builder signature only. Non-numeric cells plot as 0.
    """

    resolved = find_field_indexes(dataset.fields, mapping.y_axis)
    if resolved.error is not None:
        return OptionsResult(error=transform_error(resolved.error))

    first_row = dataset.data[0] if dataset.data else []
    values: list[float] = []
    for index in resolved.indices:
        cell = first_row[index] if index < len(first_row) else None
        values.append(float(cell) if is_number(cell) else 0.0)  # type: ignore[arg-type]

    point: dict[str, Any] = {
        "value": values,
        "name": "Values",
        "lineStyle": {"color": theme.primary, "width": style.line_width},
        "itemStyle": {"color": theme.primary},
        "label": {"show": style.show_labels, "color": theme.label_high_contrast, "fontSize": 11},
    }
    if style.filled:
        point["areaStyle"] = {"color": apply_opacity(theme.primary, style.opacity / 100.0)}

    series: dict[str, Any] = {
        "type": "radar",
        "data": [point],
        "showSymbol": style.show_points,
        "symbolSize": style.point_size,
        "emphasis": chrome.series_emphasis(theme.primary, theme, line_width=style.line_width),
        "blur": chrome.series_blur(0.3, line=True),
        **chrome.animation(style.animation, style.animation_duration),
    }

    document: dict[str, Any] = {
        "radar": {
            "indicator": [{"name": name} for name in mapping.y_axis],
            "shape": "circle" if style.circular else style.shape,
            "splitNumber": 5,
            "axisName": {"show": style.show_axis_labels, "color": theme.label, "fontSize": 12},
            "splitLine": {"lineStyle": {"color": theme.grid}},
            "splitArea": {
                "show": True,
                "areaStyle": {"color": [apply_opacity(theme.grid, 0.05), apply_opacity(theme.grid, 0.1)]},
            },
            "axisLine": {"lineStyle": {"color": theme.grid}},
        },
        "series": [series],
        "tooltip": chrome.tooltip(theme, trigger="item"),
        "legend": chrome.legend(theme, has_title=style.title is not None),
    }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.RADAR,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

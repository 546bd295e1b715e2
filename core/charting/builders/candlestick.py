"""Candlestick (OHLC) chart builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType, Row, is_number
from analysis.transform import find_field_index
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, transform_error
from core.charting.schema import ConfigError, FieldRequirement, OhlcFields, SingleField, WidgetType, missing
from core.charting.styles import CandlestickStyleOptions
from core.charting.theme import ChartColors

PRICE_ROLES = ("Open", "Close", "Low", "High")


def required_fields() -> list[FieldRequirement]:
    return [SingleField("Date", FieldType.DATE), OhlcFields()]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if not mapping.x_axis:
        return missing("Date field is required for candlestick charts")
    for role, name in zip(PRICE_ROLES, _price_fields(mapping)):
        if not name:
            return missing(f"{role} field is required for candlestick charts")
    return None


def _price_fields(mapping: DataMapping) -> tuple[str | None, ...]:
    return (mapping.open, mapping.close, mapping.low, mapping.high)


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: CandlestickStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Emit one candle per row in dataset order.

    The engine expects each candle as `[open, close, low, high]`, so the
    source columns are reordered to that layout. Non-numeric prices become
    null (a gap).
    """

    x_resolved = find_field_index(dataset.fields, mapping.x_axis)
    if x_resolved.error is not None:
        return OptionsResult(error=transform_error(x_resolved.error))
    price_indices: list[int] = []
    for role, name in zip(PRICE_ROLES, _price_fields(mapping)):
        resolved = find_field_index(dataset.fields, name)
        if resolved.error is not None:
            return OptionsResult(error=ConfigError("data_transformation_error", f"{role} field not found: {name}"))
        price_indices.append(resolved.index)

    x_index = x_resolved.index
    source: list[Row] = [[dataset.fields[x_index].name, *PRICE_ROLES]]
    for row in dataset.data:
        candle: Row = [row[x_index] if x_index < len(row) else None]
        for index in price_indices:
            cell = row[index] if index < len(row) else None
            candle.append(float(cell) if is_number(cell) else None)  # type: ignore[arg-type]
        source.append(candle)

    if style.custom_border_colors:
        border_rise = style.border_rise_color or style.rise_color
        border_fall = style.border_fall_color or style.fall_color
    else:
        border_rise, border_fall = style.rise_color, style.fall_color

    series: dict[str, Any] = {
        "type": "candlestick",
        "encode": {"x": 0, "y": [1, 2, 3, 4]},
        "barWidth": style.candle_width,
        "itemStyle": {
            "color": style.rise_color,
            "color0": style.fall_color,
            "borderColor": border_rise,
            "borderColor0": border_fall,
        },
        "emphasis": {"itemStyle": {"borderWidth": 2, "shadowBlur": 10, "shadowColor": chrome.SHADOW_COLOR}},
        "blur": chrome.series_blur(0.3),
        **chrome.animation(style.animation, style.animation_duration),
    }
    if style.show_labels:
        series["label"] = chrome.value_label(theme)

    x_axis = chrome.axis(theme, axis_type="category", split_lines=False, boundary_gap=True)
    x_axis["axisLabel"]["rotate"] = 45
    y_axis = chrome.axis(theme, axis_type="value", split_lines=True)
    y_axis["scale"] = True
    y_axis["splitArea"] = {"show": True}

    tooltip = chrome.tooltip(theme)
    tooltip["axisPointer"] = {"type": "cross"}
    document: dict[str, Any] = {
        "dataset": {"source": source},
        "xAxis": x_axis,
        "yAxis": y_axis,
        "series": [series],
        "tooltip": tooltip,
        "grid": {"left": "5%", "right": "5%", "bottom": "15%", "top": "10%", "containLabel": True},
    }
    return OptionsResult(options=document)


BUILDER = WidgetBuilder(
    widget_type=WidgetType.CANDLESTICK,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

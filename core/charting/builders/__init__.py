"""Widget builder registry.

`BUILDERS` is a closed table from `WidgetType` to the builder for every
chart-engine type. KPI and table widgets have no option document; their
display payloads come from `core.charting.builders.display`.
"""

from __future__ import annotations

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset
from core.charting.builders import area, bar, candlestick, heatmap, line, pie, radar, scatter, treemap
from core.charting.builders.base import WidgetBuilder, serialize_options
from core.charting.builders.display import build_kpi_payload, build_table_payload
from core.charting.schema import ConfigError, ConfigResult, WidgetType
from core.charting.styles import KpiStyleOptions, StyleOptions, TableStyleOptions
from core.charting.theme import DEFAULT_THEME, ChartColors

BUILDERS: dict[WidgetType, WidgetBuilder] = {
    WidgetType.LINE: line.BUILDER,
    WidgetType.BAR: bar.BUILDER,
    WidgetType.AREA: area.BUILDER,
    WidgetType.PIE: pie.BUILDER,
    WidgetType.RADAR: radar.BUILDER,
    WidgetType.SCATTER: scatter.BUILDER,
    WidgetType.CANDLESTICK: candlestick.BUILDER,
    WidgetType.HEATMAP: heatmap.BUILDER,
    WidgetType.TREEMAP: treemap.BUILDER,
}


def get_builder(widget_type: WidgetType) -> WidgetBuilder | None:
    """Return the chart builder for `widget_type`, or None for KPI/table widgets."""

    return BUILDERS.get(widget_type)


def build_widget_options(
    widget_type: WidgetType,
    dataset: Dataset,
    mapping: DataMapping,
    style: StyleOptions,
    *,
    theme: ChartColors = DEFAULT_THEME,
    aggregation: AggregationFunction = AggregationFunction.SUM,
) -> ConfigResult:
    """Build the serialized document for any widget type.

    Chart types return an option document; KPI and table widgets return their
    display payload in the same JSON envelope.
    """

    builder = get_builder(widget_type)
    if builder is not None:
        return builder.build_options(dataset, mapping, style, theme=theme, aggregation=aggregation)
    if widget_type == WidgetType.KPI and isinstance(style, KpiStyleOptions):
        return serialize_options(build_kpi_payload(dataset, mapping, style))
    if widget_type == WidgetType.TABLE and isinstance(style, TableStyleOptions):
        return serialize_options(build_table_payload(dataset, mapping, style))
    return ConfigResult(
        error=ConfigError("invalid_value", f"{type(style).__name__} cannot style a {widget_type.display_name}")
    )


__all__ = [
    "BUILDERS",
    "WidgetBuilder",
    "build_kpi_payload",
    "build_table_payload",
    "build_widget_options",
    "get_builder",
]

"""Per-widget-type style options.

Each widget owns exactly one style record matching its type. Records are
stored on widgets as a JSON string; missing keys fall back to the defaults
declared here and unknown keys are ignored, so documents written by older
releases keep loading.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from enum import StrEnum
from typing import Any

from core.charting.schema import ConfigError, WidgetType


class KpiValueFormat(StrEnum):
    """Display format for KPI values."""

    NUMBER = "Number"
    CURRENCY = "Currency"
    PERCENTAGE = "Percentage"
    CUSTOM = "Custom"


class TableRowHeight(StrEnum):
    """Row density for table widgets."""

    NORMAL = "Normal"
    COMPACT = "Compact"
    COMFORTABLE = "Comfortable"


@dataclass(frozen=True, slots=True)
class LineStyleOptions:
    """Visual options for line charts."""

    title: str | None = None
    x_axis_title: str | None = None
    y_axis_title: str | None = None
    smooth: bool = True
    area_fill: bool = False
    line_width: int = 3
    show_points: bool = False
    point_size: int = 4
    animation: bool = True
    animation_duration: int = 1000
    show_labels: bool = False
    enable_patterns: bool = False


@dataclass(frozen=True, slots=True)
class BarStyleOptions:
    """Visual options for bar charts."""

    title: str | None = None
    x_axis_title: str | None = None
    y_axis_title: str | None = None
    stacked: bool = False
    horizontal: bool = False
    bar_width: int = 60
    border_radius: int = 4
    show_labels: bool = False
    animation: bool = True
    animation_duration: int = 1000
    enable_patterns: bool = False


@dataclass(frozen=True, slots=True)
class AreaStyleOptions:
    """Visual options for area charts."""

    smooth: bool = True
    opacity: int = 60
    stacked: bool = False
    show_border: bool = True
    border_width: int = 2
    show_points: bool = False
    point_size: int = 4
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class PieStyleOptions:
    """Visual options for pie and donut charts."""

    title: str | None = None
    inner_radius: str = "0%"
    rose_type: bool = False
    show_labels: bool = True
    label_position: str = "outside"
    border_radius: int = 4
    animation: bool = True
    animation_duration: int = 1000
    enable_patterns: bool = False


@dataclass(frozen=True, slots=True)
class RadarStyleOptions:
    """Visual options for radar charts."""

    shape: str = "polygon"
    show_axis_labels: bool = True
    split_area: bool = False
    opacity: int = 50
    border_width: int = 2
    show_points: bool = False
    point_size: int = 4
    filled: bool = True
    show_labels: bool = False
    title: str | None = None
    circular: bool = False
    line_width: int = 2
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class ScatterStyleOptions:
    """Visual options for scatter and bubble charts."""

    point_size: int = 6
    point_size_min: int = 6
    point_size_max: int = 30
    opacity: int = 80
    show_bubble: bool = False
    show_labels: bool = False
    label_position: str = "inside"
    x_axis_title: str | None = None
    y_axis_title: str | None = None
    title: str | None = None
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class CandlestickStyleOptions:
    """Visual options for candlestick charts."""

    rise_color: str = "#00da3c"
    fall_color: str = "#ec0000"
    custom_border_colors: bool = False
    border_rise_color: str | None = None
    border_fall_color: str | None = None
    candle_width: int = 10
    show_labels: bool = False
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class HeatmapStyleOptions:
    """Visual options for heatmaps."""

    color_scale: str = "gradient"
    show_labels: bool = False
    show_values: bool = False
    label_position: str = "inside"
    gap: int = 2
    border_radius: int = 0
    interactive: bool = True
    color_min: str | None = None
    color_max: str | None = None
    title: str | None = None
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class TreemapStyleOptions:
    """Visual options for treemaps."""

    visual_mode: str = "squarifying"
    show_labels: bool = False
    label_position: str = "inside"
    label_size: int = 12
    gap: int = 2
    border_radius: int = 4
    show_breadcrumb: bool = False
    leaf_depth: int = 1
    color_depth: int = 0
    title: str | None = None
    animation: bool = True
    animation_duration: int = 1000


@dataclass(frozen=True, slots=True)
class KpiStyleOptions:
    """Display options for KPI cards."""

    value_format: KpiValueFormat = KpiValueFormat.NUMBER
    show_trend: bool = True
    show_progress: bool = True
    decimals: int = 0
    show_comparison: bool = True


@dataclass(frozen=True, slots=True)
class TableStyleOptions:
    """Display options for table widgets."""

    show_pagination: bool = False
    page_size: int = 10
    show_sorting: bool = True
    striped: bool = False
    hover: bool = True
    row_height: TableRowHeight = TableRowHeight.NORMAL
    show_borders: bool = True


StyleOptions = (
    LineStyleOptions
    | BarStyleOptions
    | AreaStyleOptions
    | PieStyleOptions
    | RadarStyleOptions
    | ScatterStyleOptions
    | CandlestickStyleOptions
    | HeatmapStyleOptions
    | TreemapStyleOptions
    | KpiStyleOptions
    | TableStyleOptions
)

STYLE_CLASSES: dict[WidgetType, type] = {
    WidgetType.LINE: LineStyleOptions,
    WidgetType.BAR: BarStyleOptions,
    WidgetType.AREA: AreaStyleOptions,
    WidgetType.PIE: PieStyleOptions,
    WidgetType.RADAR: RadarStyleOptions,
    WidgetType.SCATTER: ScatterStyleOptions,
    WidgetType.CANDLESTICK: CandlestickStyleOptions,
    WidgetType.HEATMAP: HeatmapStyleOptions,
    WidgetType.TREEMAP: TreemapStyleOptions,
    WidgetType.KPI: KpiStyleOptions,
    WidgetType.TABLE: TableStyleOptions,
}

_ENUM_FIELDS: dict[str, type[StrEnum]] = {
    "KpiValueFormat": KpiValueFormat,
    "TableRowHeight": TableRowHeight,
}


@dataclass(frozen=True, slots=True)
class StyleResult:
    """Decoded style options, or the ConfigError explaining why decoding failed."""

    style: StyleOptions | None = None
    error: ConfigError | None = None


def default_style(widget_type: WidgetType) -> StyleOptions:
    """Return the default style record for a widget type."""

    return STYLE_CLASSES[widget_type]()


def style_to_json(style: StyleOptions) -> str:
    """Serialize a style record to a JSON object string."""

    return json.dumps({key: _plain(value) for key, value in asdict(style).items()})


def style_from_json(widget_type: WidgetType, raw: str | dict[str, Any] | None) -> StyleResult:
    """Decode a style record for `widget_type`.

    Args:
        widget_type: Widget type whose style class should be used.
        raw: JSON object string, an already-decoded dict, or None/"" for
            defaults.

    Returns:
        StyleResult with the decoded record, or an `invalid_value` ConfigError
        when the JSON is malformed or a value has the wrong type.
    """

    if raw is None or raw == "":
        return StyleResult(style=default_style(widget_type))
    if isinstance(raw, str):
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            return StyleResult(error=ConfigError("invalid_value", f"style options are not valid JSON ({exc.msg})"))
    else:
        payload = raw
    if not isinstance(payload, dict):
        return StyleResult(error=ConfigError("invalid_value", "style options must be a JSON object"))

    style_cls = STYLE_CLASSES[widget_type]
    values: dict[str, Any] = {}
    for spec in fields(style_cls):
        if spec.name not in payload:
            continue
        coerced = _coerce(spec.type, payload[spec.name])
        if coerced is _INVALID:
            return StyleResult(
                error=ConfigError("invalid_value", f"'{spec.name}' has an invalid value: {payload[spec.name]!r}")
            )
        values[spec.name] = coerced
    return StyleResult(style=style_cls(**values))


_INVALID = object()


def _coerce(annotation: object, value: Any) -> Any:
    kind = str(annotation)
    if kind == "bool":
        return value if isinstance(value, bool) else _INVALID
    if kind == "int":
        if isinstance(value, bool):
            return _INVALID
        if isinstance(value, int) and value >= 0:
            return value
        if isinstance(value, float) and value.is_integer() and value >= 0:
            return int(value)
        return _INVALID
    if kind == "str":
        return value if isinstance(value, str) else _INVALID
    if kind == "str | None":
        return value if value is None or isinstance(value, str) else _INVALID
    enum_cls = _ENUM_FIELDS.get(kind)
    if enum_cls is not None:
        try:
            return enum_cls(value)
        except ValueError:
            return _INVALID
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, StrEnum):
        return str(value)
    return value

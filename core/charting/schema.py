"""Schema types for widget configuration building.

Widgets are driven by a closed set of types. Each ECharts-backed type has a
builder in `core.charting.builders`; builders share the types defined here for
field requirements and typed configuration errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from analysis.dto import FieldType


class WidgetType(StrEnum):
    """Closed set of dashboard widget types."""

    LINE = "Line"
    BAR = "Bar"
    PIE = "Pie"
    SCATTER = "Scatter"
    AREA = "Area"
    RADAR = "Radar"
    CANDLESTICK = "Candlestick"
    HEATMAP = "Heatmap"
    TREEMAP = "Treemap"
    KPI = "Kpi"
    TABLE = "Table"

    @property
    def display_name(self) -> str:
        """Label shown in widget pickers."""

        return _DISPLAY_NAMES[self]

    @property
    def icon_name(self) -> str:
        """Material icon name used by layers."""

        return _ICON_NAMES[self]

    @property
    def is_echarts(self) -> bool:
        """Return True when the widget renders through the chart engine."""

        return self not in (WidgetType.KPI, WidgetType.TABLE)


_DISPLAY_NAMES: dict[WidgetType, str] = {
    WidgetType.LINE: "Line Chart",
    WidgetType.BAR: "Bar Chart",
    WidgetType.PIE: "Pie Chart",
    WidgetType.SCATTER: "Scatter Plot",
    WidgetType.AREA: "Area Chart",
    WidgetType.RADAR: "Radar Chart",
    WidgetType.CANDLESTICK: "Candlestick",
    WidgetType.HEATMAP: "Heatmap",
    WidgetType.TREEMAP: "Treemap",
    WidgetType.KPI: "KPI",
    WidgetType.TABLE: "Table",
}

_ICON_NAMES: dict[WidgetType, str] = {
    WidgetType.LINE: "show-chart",
    WidgetType.BAR: "bar-chart",
    WidgetType.PIE: "pie-chart",
    WidgetType.SCATTER: "scatter-plot",
    WidgetType.AREA: "area-chart",
    WidgetType.RADAR: "radar",
    WidgetType.CANDLESTICK: "candlestick-chart",
    WidgetType.HEATMAP: "grid-on",
    WidgetType.TREEMAP: "account-tree",
    WidgetType.KPI: "monitoring",
    WidgetType.TABLE: "table-chart",
}


@dataclass(frozen=True, slots=True)
class SingleField:
    """One field filling a chart role.

    Args:
        name: Role label (e.g. "X-Axis").
        field_type: Preferred field type.
        required: Whether the role must be mapped.
    """

    name: str
    field_type: FieldType
    required: bool = True

    @property
    def display_name(self) -> str:
        """Role label."""

        return self.name


@dataclass(frozen=True, slots=True)
class MultipleFields:
    """A list of fields filling a chart role.

    Args:
        name: Role label (e.g. "Y-Axis").
        field_types: Accepted field types.
        min_count: Minimum number of fields.
        max_count: Maximum number of fields, or None for unbounded.
    """

    name: str
    field_types: tuple[FieldType, ...]
    min_count: int = 1
    max_count: int | None = None

    @property
    def display_name(self) -> str:
        """Role label."""

        return self.name


@dataclass(frozen=True, slots=True)
class OhlcFields:
    """The four numeric price roles of a candlestick chart."""

    @property
    def display_name(self) -> str:
        """Role label."""

        return "OHLC (Open, High, Low, Close)"


FieldRequirement = SingleField | MultipleFields | OhlcFields

ConfigErrorKind = Literal[
    "missing_field",
    "invalid_field_type",
    "transformation_error",
    "invalid_value",
    "data_transformation_error",
    "serialization_error",
]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """A typed widget configuration failure.

    Args:
        kind: Failure category.
        detail: Field name or free-form detail.
        expected: Expected field type for `invalid_field_type`.
        found: Actual field type for `invalid_field_type`.
    """

    kind: ConfigErrorKind
    detail: str
    expected: FieldType | None = None
    found: FieldType | None = None

    @property
    def message(self) -> str:
        """Human-readable message."""

        if self.kind == "missing_field":
            return f"Required field missing: {self.detail}"
        if self.kind == "invalid_field_type":
            return f"Field '{self.detail}' has invalid type: expected {self.expected}, found {self.found}"
        if self.kind == "transformation_error":
            return f"Data transformation failed: {self.detail}"
        if self.kind == "invalid_value":
            return f"Invalid configuration value: {self.detail}"
        if self.kind == "data_transformation_error":
            return f"Data transformation error: {self.detail}"
        return f"Serialization error: {self.detail}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ConfigResult:
    """Outcome of a builder call.

    Args:
        options: Serialized option document (JSON string) on success.
        error: ConfigError on failure.
    """

    options: str | None = None
    error: ConfigError | None = None

    @property
    def ok(self) -> bool:
        """Return True when the builder succeeded."""

        return self.error is None


def missing(detail: str) -> ConfigError:
    """Shorthand for a `missing_field` ConfigError."""

    return ConfigError("missing_field", detail)

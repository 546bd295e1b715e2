"""Widget and layer records owned by the dashboard store.

Widgets carry their style as a JSON string so the record stays independent of
the style class for its type; `core.charting.styles.style_from_json` decodes
it when a document is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from analysis.dto import DataMapping
from core.charting.schema import WidgetType
from core.charting.styles import StyleOptions, StyleResult, default_style, style_from_json, style_to_json


@dataclass(frozen=True, slots=True)
class GridPosition:
    """Placement of a widget on the dashboard grid (grid units)."""

    x: int = 0
    y: int = 0
    width: int = 4
    height: int = 4

    def as_json(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_json(cls, payload: dict[str, Any] | None) -> "GridPosition":
        payload = payload or {}
        return cls(
            x=int(payload.get("x", 0)),
            y=int(payload.get("y", 0)),
            width=int(payload.get("width", 4)),
            height=int(payload.get("height", 4)),
        )


@dataclass(slots=True)
class ChartConfig:
    """Mapping and style for one widget.

    Attributes:
        chart_type: Chart type tag; None for non-chart widgets.
        data_mapping: Field-to-role mapping.
        style_options: Style record serialized as a JSON object string.
    """

    chart_type: WidgetType | None = None
    data_mapping: DataMapping = field(default_factory=DataMapping)
    style_options: str = "{}"

    def as_json(self) -> dict[str, Any]:
        return {
            "chart_type": str(self.chart_type) if self.chart_type is not None else None,
            "data_mapping": self.data_mapping.as_json(),
            "style_options": self.style_options,
        }

    @classmethod
    def from_json(cls, payload: dict[str, Any] | None) -> "ChartConfig":
        """Decode a chart config.

        Raises:
            ValueError: When `chart_type` is not a known widget type.
        """

        payload = payload or {}
        chart_type = payload.get("chart_type")
        return cls(
            chart_type=WidgetType(chart_type) if chart_type else None,
            data_mapping=DataMapping.from_json(payload.get("data_mapping")),
            style_options=str(payload.get("style_options") or "{}"),
        )


@dataclass(slots=True)
class Widget:
    """A configured dashboard widget."""

    id: str
    title: str
    widget_type: WidgetType
    chart_config: ChartConfig = field(default_factory=ChartConfig)
    grid_position: GridPosition = field(default_factory=GridPosition)
    subtitle: str | None = None

    @classmethod
    def create(
        cls,
        widget_id: str,
        widget_type: WidgetType,
        *,
        title: str | None = None,
        mapping: DataMapping | None = None,
        style: StyleOptions | None = None,
        position: GridPosition | None = None,
    ) -> "Widget":
        """Build a widget with default style and placement for its type."""

        return cls(
            id=widget_id,
            title=title or widget_type.display_name,
            widget_type=widget_type,
            chart_config=ChartConfig(
                chart_type=widget_type if widget_type.is_echarts else None,
                data_mapping=mapping or DataMapping(),
                style_options=style_to_json(style or default_style(widget_type)),
            ),
            grid_position=position or GridPosition(),
        )

    def style(self) -> StyleResult:
        """Decode this widget's style record for its own type."""

        return style_from_json(self.widget_type, self.chart_config.style_options)

    def with_mapping(self, mapping: DataMapping) -> "Widget":
        return replace(self, chart_config=replace(self.chart_config, data_mapping=mapping))

    def with_position(self, position: GridPosition) -> "Widget":
        return replace(self, grid_position=position)

    def as_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "widget_type": str(self.widget_type),
            "chart_config": self.chart_config.as_json(),
            "grid_position": self.grid_position.as_json(),
        }
        if self.subtitle is not None:
            payload["subtitle"] = self.subtitle
        return payload

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Widget":
        """Decode a widget.

        Raises:
            ValueError: When the widget type is unknown.
        """

        subtitle = payload.get("subtitle")
        return cls(
            id=str(payload.get("id", "")),
            title=str(payload.get("title", "")),
            widget_type=WidgetType(payload.get("widget_type")),
            chart_config=ChartConfig.from_json(payload.get("chart_config")),
            grid_position=GridPosition.from_json(payload.get("grid_position")),
            subtitle=str(subtitle) if subtitle is not None else None,
        )


@dataclass(slots=True)
class Layer:
    """Sidebar entry controlling one widget's visibility and lock state."""

    id: str
    widget_id: str
    label: str
    icon: str
    visible: bool = True
    locked: bool = False

    @classmethod
    def for_widget(cls, widget: Widget) -> "Layer":
        return cls(
            id=f"layer_{widget.id}",
            widget_id=widget.id,
            label=widget.title,
            icon=widget.widget_type.icon_name,
        )

    def as_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "widget_id": self.widget_id,
            "label": self.label,
            "icon": self.icon,
            "visible": self.visible,
            "locked": self.locked,
        }

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Layer":
        return cls(
            id=str(payload.get("id", "")),
            widget_id=str(payload.get("widget_id", "")),
            label=str(payload.get("label", "")),
            icon=str(payload.get("icon", "")),
            visible=bool(payload.get("visible", True)),
            locked=bool(payload.get("locked", False)),
        )

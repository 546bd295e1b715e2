"""Shared option-document fragments for chart builders.

Every builder assembles a nested dict in the rendering engine's schema
(`dataset.source`, `xAxis`, `yAxis`, `series`, `tooltip`, `legend`, `grid`,
`title`). The fragments here keep hover/blur interaction states, tooltip and
legend chrome, and axis styling identical across chart types.
"""

from __future__ import annotations

from typing import Any

from core.charting.theme import ChartColors, apply_opacity, lighten_color

# Decal images cycled per series when accessibility patterns are enabled.
PATTERNS: tuple[str, ...] = (
    "path://M0,0 L10,10 M10,0 L0,10",
    "path://M0,5 L10,5",
    "path://M5,0 L5,10",
    "path://M0,0 L10,10",
    "path://M0,10 L10,0",
    "path://M0,0 L5,5 L10,0 L5,10 Z",
    "path://M5,0 L10,5 L5,10 L0,5 Z",
    "circle",
)

ANIMATION_EASING = "cubicOut"
TOOLTIP_CSS = "box-shadow: 0 4px 6px rgba(0,0,0,0.1); border-radius: 0.5rem;"
SHADOW_COLOR = "rgba(0, 0, 0, 0.3)"


def palette_color(theme: ChartColors, index: int) -> str:
    """Return the palette color for a series index, cycling when exhausted."""

    palette = theme.to_palette()
    return palette[index % len(palette)]


def pattern_for(index: int) -> str:
    """Return the decal pattern for a series index."""

    return PATTERNS[index % len(PATTERNS)]


def animation(enabled: bool, duration: int) -> dict[str, Any]:
    """Animation keys shared by every series."""

    return {
        "animation": enabled,
        "animationDuration": duration,
        "animationEasing": ANIMATION_EASING,
    }


def series_emphasis(
    color: str,
    theme: ChartColors,
    *,
    line_width: int | None = None,
    focus: str = "series",
    lighten: float = 0.2,
) -> dict[str, Any]:
    """Hover state: focus the series and lighten it with a high-contrast outline.

    Args:
        color: Series base color.
        theme: Active theme.
        line_width: Base line width; when given the hovered line is 2px wider.
        focus: Engine focus mode (`series` or `self`).
        lighten: Lightness increase for the hovered color.

    Returns:
        The `emphasis` fragment.
    """

    hovered = lighten_color(color, lighten)
    emphasis: dict[str, Any] = {"focus": focus}
    if focus == "series":
        emphasis["blurScope"] = "coordinateSystem"
    if line_width is not None:
        emphasis["lineStyle"] = {"width": line_width + 2, "color": hovered}
    emphasis["itemStyle"] = {
        "color": hovered,
        "borderColor": theme.label_high_contrast,
        "borderWidth": 2,
        "shadowBlur": 10,
        "shadowColor": SHADOW_COLOR,
    }
    emphasis["label"] = {
        "show": True,
        "fontSize": 13,
        "fontWeight": "bold",
        "color": theme.label_high_contrast,
    }
    return emphasis


def series_blur(opacity: float = 0.3, *, line: bool = False, area_opacity: float | None = None) -> dict[str, Any]:
    """Dimmed state applied to series that are not hovered."""

    blur: dict[str, Any] = {}
    if line:
        blur["lineStyle"] = {"opacity": opacity}
    if area_opacity is not None:
        blur["areaStyle"] = {"opacity": area_opacity}
    blur["itemStyle"] = {"opacity": opacity}
    return blur


def value_label(theme: ChartColors, *, position: str = "top", font_size: int = 11) -> dict[str, Any]:
    """Visible data label in the high-contrast label color."""

    return {
        "show": True,
        "position": position,
        "fontSize": font_size,
        "color": theme.label_high_contrast,
    }


def tooltip(theme: ChartColors, *, trigger: str = "axis", formatter: str | None = None) -> dict[str, Any]:
    """Themed tooltip chrome."""

    payload: dict[str, Any] = {
        "trigger": trigger,
        "backgroundColor": theme.background,
        "borderColor": theme.grid,
        "borderWidth": 1,
        "textStyle": {
            "color": theme.label_high_contrast,
            "fontSize": 12,
            "fontWeight": "normal",
        },
        "extraCssText": TOOLTIP_CSS,
    }
    if formatter is not None:
        payload["formatter"] = formatter
    return payload


def legend(theme: ChartColors, *, has_title: bool) -> dict[str, Any]:
    """Legend placed below the title when one is shown."""

    return {
        "top": "8%" if has_title else "0%",
        "textStyle": {"color": theme.text, "fontSize": 12},
    }


def title(text: str | None, theme: ChartColors) -> dict[str, Any] | None:
    """Centered chart title, or None when no title is configured."""

    if text is None:
        return None
    return {
        "text": text,
        "left": "center",
        "top": "0%",
        "textStyle": {"color": theme.text, "fontSize": 16, "fontWeight": 600},
    }


def grid(
    *,
    has_title: bool,
    has_x_title: bool = False,
    has_y_title: bool = False,
    top_with_title: str = "20%",
    top_without_title: str = "15%",
) -> dict[str, Any]:
    """Plot-area margins that leave room for the title and axis names."""

    return {
        "left": "8%" if has_y_title else "3%",
        "right": "4%",
        "bottom": "15%" if has_x_title else "10%",
        "top": top_with_title if has_title else top_without_title,
        "containLabel": True,
    }


def axis(
    theme: ChartColors,
    *,
    axis_type: str,
    split_lines: bool,
    boundary_gap: bool | None = None,
) -> dict[str, Any]:
    """Base axis with themed line, labels, and optional dashed split lines."""

    payload: dict[str, Any] = {"type": axis_type}
    if boundary_gap is not None:
        payload["boundaryGap"] = boundary_gap
    payload["axisLine"] = {"lineStyle": {"color": theme.grid}}
    if split_lines:
        payload["splitLine"] = {"lineStyle": {"color": theme.grid, "type": "dashed"}}
    payload["axisLabel"] = {"color": theme.label, "fontSize": 11}
    return payload


def name_axis(axis_payload: dict[str, Any], name: str | None, theme: ChartColors, *, vertical: bool) -> dict[str, Any]:
    """Attach an axis name centered along the axis.

    Vertical axes rotate the name and need a wider gap to clear tick labels.
    """

    if name is None:
        return axis_payload
    axis_payload["name"] = name
    axis_payload["nameLocation"] = "middle"
    if vertical:
        axis_payload["nameRotate"] = 90
    axis_payload["nameTextStyle"] = {"color": theme.label, "fontSize": 12, "fontWeight": 500}
    axis_payload["nameGap"] = 50 if vertical else 30
    return axis_payload


def with_title(options: dict[str, Any], text: str | None, theme: ChartColors) -> dict[str, Any]:
    """Add a `title` entry to an option document when a title is configured."""

    title_payload = title(text, theme)
    if title_payload is not None:
        options["title"] = title_payload
    return options


def linear_gradient(color: str, top_opacity: float, bottom_opacity: float) -> dict[str, Any]:
    """Vertical gradient fill fading `color` from top to bottom."""

    return {
        "type": "linear",
        "x": 0,
        "y": 0,
        "x2": 0,
        "y2": 1,
        "colorStops": [
            {"offset": 0, "color": apply_opacity(color, top_opacity)},
            {"offset": 1, "color": apply_opacity(color, bottom_opacity)},
        ],
    }


def decal(index: int) -> dict[str, Any]:
    """Decal overlay for the series at `index`."""

    return {
        "symbol": pattern_for(index),
        "symbolSize": 1,
        "color": "rgba(255, 255, 255, 0.4)",
        "dashArrayX": 5,
        "dashArrayY": 5,
    }

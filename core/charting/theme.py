"""Theme colors used to style chart option documents.

Colors are plain CSS strings, normally `rgb(r, g, b)`. The active theme is
passed into builders explicitly; `DEFAULT_THEME` is a light palette used when
the caller does not supply one.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChartColors:
    """Semantic color roles for charts.

    Attributes:
        primary: Main series color.
        text: Body text color.
        grid: Axis lines and split lines.
        background: Chart background and tooltip fill.
        secondary: Secondary accent.
        accent: Tertiary accent.
        info: Informational color.
        success: Positive color (candlestick rise default).
        warning: Warning color.
        error: Negative color (candlestick fall default).
        label: Low-emphasis axis label color.
        neutral: Neutral fill.
        primary_focus: Hover variant of primary.
        secondary_focus: Hover variant of secondary.
        neutral_focus: Hover variant of neutral.
        label_high_contrast: Label color meeting WCAG AA contrast.
    """

    primary: str
    text: str
    grid: str
    background: str
    secondary: str
    accent: str
    info: str
    success: str
    warning: str
    error: str
    label: str
    neutral: str
    primary_focus: str
    secondary_focus: str
    neutral_focus: str
    label_high_contrast: str

    def to_palette(self) -> list[str]:
        """Return the categorical palette used for multi-series charts.

        Adjacent entries are chosen for contrast; the last entry repeats
        `info` so twelve series remain distinguishable.
        """

        return [
            self.primary,
            self.info,
            self.success,
            self.warning,
            self.error,
            self.accent,
            self.secondary,
            self.primary_focus,
            self.neutral,
            self.secondary_focus,
            self.neutral_focus,
            self.info,
        ]


DEFAULT_THEME = ChartColors(
    primary="rgb(37, 99, 235)",
    text="rgb(31, 41, 55)",
    grid="rgb(229, 231, 235)",
    background="rgb(255, 255, 255)",
    secondary="rgb(100, 116, 139)",
    accent="rgb(6, 182, 212)",
    info="rgb(56, 189, 248)",
    success="rgb(34, 197, 94)",
    warning="rgb(245, 158, 11)",
    error="rgb(239, 68, 68)",
    label="rgba(31, 41, 55, 0.1)",
    neutral="rgb(115, 115, 115)",
    primary_focus="rgb(29, 78, 216)",
    secondary_focus="rgb(71, 85, 105)",
    neutral_focus="rgb(82, 82, 82)",
    label_high_contrast="rgb(17, 24, 39)",
)


def _split_rgb(color: str) -> list[str] | None:
    inner = color.strip()
    for prefix in ("rgba(", "rgb("):
        if inner.startswith(prefix):
            inner = inner[len(prefix):]
            break
    inner = inner.rstrip(")")
    parts = inner.split(",")
    if len(parts) < 3:
        return None
    return [part.strip() for part in parts]


def _channel(raw: str) -> float:
    try:
        return float(raw) / 255.0
    except ValueError:
        return 0.0


def _alpha(parts: list[str]) -> str | None:
    if len(parts) <= 3:
        return None
    try:
        return _format_float(float(parts[3]))
    except ValueError:
        return None


def _format_float(value: float) -> str:
    return f"{value:g}"


def _to_byte(value: float) -> int:
    return max(0, min(255, int(value * 255.0 + 0.5)))


def _adjust_lightness(color: str, adjust) -> str:
    parts = _split_rgb(color)
    if parts is None:
        return color

    r, g, b = (_channel(p) for p in parts[:3])
    alpha = _alpha(parts)
    hue, lightness, saturation = colorsys.rgb_to_hls(r, g, b)
    new_lightness = max(0.0, min(1.0, adjust(lightness)))
    nr, ng, nb = colorsys.hls_to_rgb(hue, new_lightness, saturation)

    channels = f"{_to_byte(nr)}, {_to_byte(ng)}, {_to_byte(nb)}"
    if alpha is not None:
        return f"rgba({channels}, {alpha})"
    return f"rgb({channels})"


def lighten_color(color: str, amount: float) -> str:
    """Move a color's HSL lightness toward white.

    Args:
        color: `rgb(...)` or `rgba(...)` string.
        amount: Fraction of the remaining distance to white (0..1).

    Returns:
        The lightened color, or the input unchanged when it cannot be parsed.
    """

    return _adjust_lightness(color, lambda lightness: lightness + (1.0 - lightness) * amount)


def darken_color(color: str, amount: float) -> str:
    """Move a color's HSL lightness toward black.

    Args:
        color: `rgb(...)` or `rgba(...)` string.
        amount: Fraction of the current lightness to remove (0..1).

    Returns:
        The darkened color, or the input unchanged when it cannot be parsed.
    """

    return _adjust_lightness(color, lambda lightness: lightness * (1.0 - amount))


def apply_opacity(color: str, opacity: float) -> str:
    """Return `color` as an `rgba(...)` string with the given opacity."""

    parts = _split_rgb(color)
    if parts is None:
        return color
    return f"rgba({parts[0]}, {parts[1]}, {parts[2]}, {_format_float(opacity)})"

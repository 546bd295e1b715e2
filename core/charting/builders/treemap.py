"""Treemap builder."""

from __future__ import annotations

from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, FieldType, is_number
from analysis.transform import find_field_index, find_field_indexes
from core.charting import options as chrome
from core.charting.builders.base import OptionsResult, WidgetBuilder, cell_label, transform_error
from core.charting.schema import ConfigError, FieldRequirement, MultipleFields, SingleField, WidgetType, missing
from core.charting.styles import TreemapStyleOptions
from core.charting.theme import ChartColors

MIN_LEVELS = 2
MAX_LEVELS = 4


def required_fields() -> list[FieldRequirement]:
    return [
        MultipleFields("Hierarchy Levels", (FieldType.TEXT,), min_count=MIN_LEVELS, max_count=MAX_LEVELS),
        SingleField("Value (Optional)", FieldType.NUMERIC, required=False),
    ]


def validate_config(mapping: DataMapping) -> ConfigError | None:
    if len(mapping.hierarchy) < MIN_LEVELS:
        return missing(f"At least {MIN_LEVELS} hierarchy levels are required for treemaps")
    if len(mapping.hierarchy) > MAX_LEVELS:
        return ConfigError("invalid_value", f"Treemaps support at most {MAX_LEVELS} hierarchy levels")
    return None


def build_tree(dataset: Dataset, level_indices: tuple[int, ...], value_index: int | None) -> list[dict[str, Any]]:
    """Nest rows under their hierarchy path, summing leaf values.

    Rows with a null level cell are skipped. Without a value field every row
    counts as 1.

    Args:
        dataset: Source dataset.
        level_indices: Column indices of the hierarchy levels, outermost first.
        value_index: Column index of the value field, if any.

    Returns:
        Top-level treemap nodes (`name`, `value` or `children`).
    """

    root: dict[str, Any] = {}
    for row in dataset.data:
        path = [row[i] if i < len(row) else None for i in level_indices]
        if any(cell is None for cell in path):
            continue
        value = 1.0
        if value_index is not None and value_index < len(row) and is_number(row[value_index]):
            value = float(row[value_index])  # type: ignore[arg-type]

        children = root
        for depth, cell in enumerate(path):
            name = cell_label(cell)
            node = children.setdefault(name, {"name": name, "children": {}, "value": 0.0})
            if depth == len(path) - 1:
                node["value"] += value
            children = node["children"]

    return [_freeze(node) for node in root.values()]


def _freeze(node: dict[str, Any]) -> dict[str, Any]:
    if node["children"]:
        return {"name": node["name"], "children": [_freeze(child) for child in node["children"].values()]}
    return {"name": node["name"], "value": node["value"]}


def build(
    dataset: Dataset,
    mapping: DataMapping,
    style: TreemapStyleOptions,
    theme: ChartColors,
    aggregation: AggregationFunction,
) -> OptionsResult:
    """Assemble a treemap from the mapped hierarchy levels and optional value."""

    levels = find_field_indexes(dataset.fields, mapping.hierarchy)
    if levels.error is not None:
        return OptionsResult(error=transform_error(levels.error))
    value_index = None
    if mapping.y_axis:
        resolved = find_field_index(dataset.fields, mapping.y_axis[0])
        if resolved.error is not None:
            return OptionsResult(error=transform_error(resolved.error))
        value_index = resolved.index

    border = {"borderColor": theme.background, "borderWidth": style.gap, "gapWidth": style.gap}
    series: dict[str, Any] = {
        "type": "treemap",
        "name": "Root",
        "data": build_tree(dataset, levels.indices, value_index),
        "leafDepth": style.leaf_depth,
        "colorMappingBy": "index",
        "roam": False,
        "breadcrumb": {"show": style.show_breadcrumb},
        "label": {
            "show": True,
            "position": style.label_position,
            "fontSize": style.label_size,
            "color": "#fff",
        },
        "upperLabel": {"show": True, "height": 30, "color": "#fff"},
        "itemStyle": {**border, "borderRadius": style.border_radius},
        "levels": [
            {"itemStyle": {"borderWidth": 0, "gapWidth": style.gap}},
            {"itemStyle": {"gapWidth": style.gap}, "colorSaturation": [0.35, 0.5]},
            {"itemStyle": {"gapWidth": 1}, "colorSaturation": [0.3, 0.6]},
        ],
        "emphasis": {"itemStyle": {"shadowBlur": 20, "shadowColor": chrome.SHADOW_COLOR}},
        **chrome.animation(style.animation, style.animation_duration),
    }

    document: dict[str, Any] = {
        "color": theme.to_palette(),
        "series": [series],
        "tooltip": chrome.tooltip(theme, trigger="item", formatter="{b}: {c}"),
    }
    return OptionsResult(options=chrome.with_title(document, style.title, theme))


BUILDER = WidgetBuilder(
    widget_type=WidgetType.TREEMAP,
    required_fields=required_fields,
    validate_config=validate_config,
    build=build,
)

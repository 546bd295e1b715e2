"""Uniform builder contract shared by every widget type.

A builder is a record of pure functions keyed by `WidgetType`. The registry in
`core.charting.builders` is a closed lookup table over those records; there is
no subclassing and no dynamic registration.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, Row
from analysis.transform import TransformError, dataset_to_echarts_format
from core.charting.schema import ConfigError, ConfigResult, FieldRequirement, WidgetType
from core.charting.styles import STYLE_CLASSES, StyleOptions, default_style
from core.charting.theme import DEFAULT_THEME, ChartColors

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OptionsResult:
    """An assembled option document, or the ConfigError that stopped assembly."""

    options: dict[str, Any] | None = None
    error: ConfigError | None = None


@dataclass(frozen=True, slots=True)
class TableSource:
    """Grouped header + data rows for tabular chart types."""

    rows: tuple[Row, ...] = ()
    error: ConfigError | None = None


BuildFn = Callable[[Dataset, DataMapping, Any, ChartColors, AggregationFunction], OptionsResult]


@dataclass(frozen=True, slots=True)
class WidgetBuilder:
    """Stateless builder for one widget type.

    Attributes:
        widget_type: Widget type served by this builder.
        required_fields: Returns the field roles the type needs.
        validate_config: Returns a ConfigError when the mapping is unusable.
        build: Assembles the option document (as a dict).
    """

    widget_type: WidgetType
    required_fields: Callable[[], list[FieldRequirement]]
    validate_config: Callable[[DataMapping], ConfigError | None]
    build: BuildFn

    def default_style(self) -> StyleOptions:
        """Return the default style record for this widget type."""

        return default_style(self.widget_type)

    def build_options(
        self,
        dataset: Dataset,
        mapping: DataMapping,
        style: StyleOptions,
        *,
        theme: ChartColors = DEFAULT_THEME,
        aggregation: AggregationFunction = AggregationFunction.SUM,
    ) -> ConfigResult:
        """Validate, assemble, and serialize the option document.

        Args:
            dataset: Source dataset.
            mapping: Field-to-role mapping.
            style: Style record; must match this builder's widget type.
            theme: Active color theme.
            aggregation: Aggregation used by grouped transforms.

        Returns:
            ConfigResult with the JSON option document, or a ConfigError.
        """

        if not isinstance(style, STYLE_CLASSES[self.widget_type]):
            return ConfigResult(
                error=ConfigError(
                    "invalid_value",
                    f"{type(style).__name__} cannot style a {self.widget_type.display_name}",
                )
            )
        invalid = self.validate_config(mapping)
        if invalid is not None:
            return ConfigResult(error=invalid)

        result = self.build(dataset, mapping, style, theme, aggregation)
        if result.error is not None:
            logger.debug("Builder for %s failed: %s", self.widget_type, result.error.message)
            return ConfigResult(error=result.error)
        return serialize_options(result.options or {})


def serialize_options(options: dict[str, Any]) -> ConfigResult:
    """Encode an option document as JSON, reporting failures as SerializationError.

    Non-finite floats are rejected because the rendering engine only accepts
    strict JSON.
    """

    try:
        return ConfigResult(options=json.dumps(options, allow_nan=False))
    except (TypeError, ValueError) as exc:
        return ConfigResult(error=ConfigError("serialization_error", str(exc)))


def transform_error(error: TransformError) -> ConfigError:
    """Wrap a TransformError as a `data_transformation_error`."""

    return ConfigError("data_transformation_error", error.message)


def tabular_source(dataset: Dataset, mapping: DataMapping, aggregation: AggregationFunction) -> TableSource:
    """Run the grouped-aggregate transform for x/y chart types."""

    result = dataset_to_echarts_format(dataset, mapping, aggregation)
    if result.error is not None:
        return TableSource(error=transform_error(result.error))
    return TableSource(rows=result.rows)


def cell_label(value: object) -> str:
    """Category label for a cell; strings pass through and null becomes ""."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

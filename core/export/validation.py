"""Structural validation and automatic repair of dashboard templates.

Validation covers the version, metadata timestamps, widgets, datasets, and
layer-to-widget references. Only the first ten rows of each dataset are
type-checked; every row is length-checked.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from analysis.dto import Field, FieldType, Row, is_number
from analysis.type_inference import is_rfc3339
from core.charting.schema import WidgetType
from core.dashboard import DEFAULT_TITLE
from core.export.errors import ValidationIssue
from core.export.template import SUPPORTED_VERSIONS, DashboardTemplate, DatasetExport
from core.widgets import Widget

logger = logging.getLogger(__name__)

TYPE_CHECKED_ROWS = 10


def validate_template(template: DashboardTemplate) -> list[ValidationIssue]:
    """Collect every validation issue in a template.

    An unsupported version stops validation immediately.

    Returns:
        Issues in document order; callers split errors from warnings.
    """

    if template.version not in SUPPORTED_VERSIONS:
        return [
            ValidationIssue.error(
                "version",
                f"Unsupported version '{template.version}'. Supported: {', '.join(SUPPORTED_VERSIONS)}",
            )
        ]

    issues: list[ValidationIssue] = []
    _validate_metadata(template, issues)
    _validate_widgets(template.widgets, issues)
    _validate_datasets(template.datasets, issues)
    _validate_cross_references(template, issues)
    logger.debug(
        "Validation complete: %d errors, %d warnings",
        sum(1 for i in issues if i.is_error),
        sum(1 for i in issues if not i.is_error),
    )
    return issues


def _validate_metadata(template: DashboardTemplate, issues: list[ValidationIssue]) -> None:
    metadata = template.metadata
    if not metadata.title.strip():
        issues.append(ValidationIssue.warning("metadata.title", "Dashboard title is empty"))
    for name in ("created_at", "exported_at"):
        value = getattr(metadata, name)
        if not is_rfc3339(value):
            issues.append(ValidationIssue.error(f"metadata.{name}", f"Invalid timestamp: {value!r}"))


def _validate_widgets(widgets: list[Widget], issues: list[ValidationIssue]) -> None:
    if not widgets:
        issues.append(ValidationIssue.warning("widgets", "No widgets in template"))
        return

    seen: set[str] = set()
    duplicates: list[ValidationIssue] = []
    for idx, widget in enumerate(widgets):
        path = f"widgets[{idx}]"
        if not widget.id.strip():
            issues.append(ValidationIssue.error(f"{path}.id", "Widget ID cannot be empty"))
        if widget.grid_position.width <= 0 or widget.grid_position.height <= 0:
            issues.append(
                ValidationIssue.error(f"{path}.grid_position", "Grid size (width/height) must be greater than zero")
            )
        _validate_widget_mapping(widget, path, issues)
        if widget.id in seen:
            duplicates.append(ValidationIssue.error(f"{path}.id", f"Duplicate widget ID: '{widget.id}'"))
        seen.add(widget.id)
    issues.extend(duplicates)


def _validate_widget_mapping(widget: Widget, path: str, issues: list[ValidationIssue]) -> None:
    mapping = widget.chart_config.data_mapping
    prefix = f"{path}.data_mapping"
    kind = widget.widget_type

    if kind in (WidgetType.BAR, WidgetType.LINE, WidgetType.AREA):
        if mapping.x_axis is None:
            issues.append(ValidationIssue.warning(f"{prefix}.x_axis", "No X-axis field configured"))
        if not mapping.y_axis:
            issues.append(ValidationIssue.warning(f"{prefix}.y_axis", "No Y-axis fields configured"))
    elif kind == WidgetType.PIE:
        if mapping.x_axis is None:
            issues.append(
                ValidationIssue.warning(f"{prefix}.x_axis", "No dimension field (x_axis) configured for Pie chart")
            )
        if not mapping.y_axis:
            issues.append(
                ValidationIssue.warning(f"{prefix}.y_axis", "No value field (y_axis) configured for Pie chart")
            )
    elif kind == WidgetType.SCATTER:
        if mapping.x_axis is None or not mapping.y_axis:
            issues.append(ValidationIssue.warning(prefix, "Scatter plot requires X and Y axes"))
    elif kind == WidgetType.TABLE:
        if not mapping.columns:
            issues.append(ValidationIssue.warning(f"{prefix}.columns", "No columns configured"))
    elif kind == WidgetType.KPI:
        if mapping.kpi_field is None and not mapping.y_axis:
            issues.append(ValidationIssue.warning(f"{prefix}.kpi_field", "No KPI field configured"))


def _validate_datasets(datasets: list[DatasetExport], issues: list[ValidationIssue]) -> None:
    if not datasets:
        issues.append(ValidationIssue.warning("datasets", "No datasets in template"))
        return

    seen: set[str] = set()
    duplicates: list[ValidationIssue] = []
    for idx, dataset in enumerate(datasets):
        path = f"datasets[{idx}]"
        if not dataset.id.strip():
            issues.append(ValidationIssue.error(f"{path}.id", "Dataset ID cannot be empty"))
        if not dataset.name.strip():
            issues.append(ValidationIssue.error(f"{path}.name", "Dataset name cannot be empty"))
        if not dataset.fields:
            issues.append(ValidationIssue.error(f"{path}.fields", "Dataset must have at least one field"))
        _validate_fields(dataset.fields, path, issues)
        if dataset.data is not None:
            _validate_rows(dataset.data, dataset.fields, path, issues)
        if dataset.id in seen:
            duplicates.append(ValidationIssue.error(f"{path}.id", f"Duplicate dataset ID: '{dataset.id}'"))
        seen.add(dataset.id)
    issues.extend(duplicates)


def _validate_fields(fields: list[Field], base_path: str, issues: list[ValidationIssue]) -> None:
    seen: set[str] = set()
    for idx, field in enumerate(fields):
        path = f"{base_path}.fields[{idx}].name"
        if not field.name.strip():
            issues.append(ValidationIssue.error(path, "Field name cannot be empty"))
        if field.name in seen:
            issues.append(ValidationIssue.error(path, f"Duplicate field name: '{field.name}'"))
        seen.add(field.name)


def _validate_rows(data: list[Row], fields: list[Field], base_path: str, issues: list[ValidationIssue]) -> None:
    if not data:
        issues.append(ValidationIssue.warning(f"{base_path}.data", "Dataset has no data rows"))
        return

    for row_idx, row in enumerate(data):
        if len(row) != len(fields):
            issues.append(
                ValidationIssue.error(
                    f"{base_path}.data[{row_idx}]",
                    f"Row has {len(row)} columns but {len(fields)} fields are defined",
                )
            )
            continue
        if row_idx >= TYPE_CHECKED_ROWS:
            continue
        for col_idx, (value, field) in enumerate(zip(row, fields)):
            if value is not None and not _value_matches(value, field.field_type):
                issues.append(
                    ValidationIssue.warning(
                        f"{base_path}.data[{row_idx}][{col_idx}]",
                        f"Field '{field.name}' expects {field.field_type} but got {value!r}",
                    )
                )


def _value_matches(value: Any, field_type: FieldType) -> bool:
    if field_type == FieldType.NUMERIC:
        return is_number(value)
    if field_type == FieldType.TEXT:
        return isinstance(value, str)
    if field_type == FieldType.BOOLEAN:
        return isinstance(value, bool)
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
        return True
    except ValueError:
        return is_rfc3339(value)


def _validate_cross_references(template: DashboardTemplate, issues: list[ValidationIssue]) -> None:
    widget_ids = {w.id for w in template.widgets}
    for idx, layer in enumerate(template.layers):
        if layer.widget_id not in widget_ids:
            issues.append(
                ValidationIssue.error(
                    f"layers[{idx}].widget_id",
                    f"References non-existent widget: '{layer.widget_id}'",
                )
            )


def sanitize_template(template: DashboardTemplate) -> list[str]:
    """Repair a template in place.

    Fixes: blank title becomes the default title, widgets with a
    non-positive grid size are dropped, and layers pointing at missing
    widgets are dropped.

    Returns:
        Human-readable descriptions of the fixes applied.
    """

    fixes: list[str] = []
    if not template.metadata.title.strip():
        template.metadata.title = DEFAULT_TITLE
        fixes.append(f"Set empty title to '{DEFAULT_TITLE}'")

    kept = [w for w in template.widgets if w.grid_position.width > 0 and w.grid_position.height > 0]
    if len(kept) < len(template.widgets):
        fixes.append(f"Removed {len(template.widgets) - len(kept)} widgets with invalid dimensions")
        template.widgets = kept

    widget_ids = {w.id for w in template.widgets}
    layers = [layer for layer in template.layers if layer.widget_id in widget_ids]
    if len(layers) < len(template.layers):
        fixes.append(f"Removed {len(template.layers) - len(layers)} orphaned layers")
        template.layers = layers

    return fixes

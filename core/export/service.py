"""Dashboard export and import.

Import runs in a fixed order: parse JSON, migrate the legacy version, reject
unsupported versions, decode, validate (errors block, warnings are logged),
sanitize, and finally install into the store. Nothing touches the store
until every earlier step has passed.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime

from analysis.dto import Dataset
from core.dashboard import DashboardStore
from core.export.errors import TemplateExportError, TemplateImportError, ValidationIssue
from core.export.template import (
    SUPPORTED_VERSIONS,
    DashboardTemplate,
    TemplateDecodeError,
    TemplateType,
    generate_filename,
    migrate_version,
    utc_timestamp,
)
from core.export.validation import sanitize_template, validate_template

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"line (\d+)")


@dataclass(frozen=True, slots=True)
class ExportResult:
    """A serialized template and its filename, or the export error."""

    filename: str | None = None
    content: str | None = None
    template: DashboardTemplate | None = None
    error: TemplateExportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class ImportResult:
    """The installed template with its warnings and fixes, or the import error."""

    template: DashboardTemplate | None = None
    warnings: tuple[ValidationIssue, ...] = ()
    fixes: tuple[str, ...] = ()
    error: TemplateImportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def export_dashboard(
    store: DashboardStore,
    template_type: TemplateType,
    *,
    now: datetime | None = None,
) -> ExportResult:
    """Serialize the store as a template document.

    Returns:
        ExportResult with the filename and JSON text. Fails with
        `empty_dashboard` before serializing when there are no widgets,
        `filename_generation_failed` for a blank title, and
        `serialization_failed` when encoding fails.
    """

    logger.info("Exporting dashboard %r as %s template", store.title, template_type)
    if not store.widgets:
        logger.error("Export failed: dashboard has no widgets")
        return ExportResult(error=TemplateExportError("empty_dashboard"))

    now = utc_timestamp(now)
    template = DashboardTemplate.from_store(store, template_type, now=now)
    logger.info(
        "Template created: %d widgets, %d datasets, %d layers",
        len(template.widgets),
        len(template.datasets),
        len(template.layers),
    )

    filename = generate_filename(template.metadata.title, template_type, now=now)
    if filename is None:
        return ExportResult(
            error=TemplateExportError("filename_generation_failed", template.metadata.title, "Title is empty")
        )

    try:
        content = template.to_json()
    except (TypeError, ValueError) as exc:
        logger.error("Serialization failed: %s", exc)
        return ExportResult(error=TemplateExportError("serialization_failed", "dashboard template", str(exc)))

    logger.info("Export of %s completed", filename)
    return ExportResult(filename=filename, content=content, template=template)


def extract_line_number(message: str) -> int | None:
    """Pull the first `line N` out of a decoder error message."""

    match = _LINE_RE.search(message)
    return int(match.group(1)) if match else None


def import_dashboard(json_text: str, filename: str, store: DashboardStore) -> ImportResult:
    """Validate a template document and install it into the store.

    Args:
        json_text: Template document text.
        filename: Source name used in error messages.
        store: Store replaced on success; untouched on failure.

    Returns:
        ImportResult with warnings and applied fixes, or a TemplateImportError.
    """

    logger.info("Importing template %s (%d bytes)", filename, len(json_text))
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        logger.error("JSON parse failed: %s", exc)
        return ImportResult(
            error=TemplateImportError("parse_failed", filename=filename, line=exc.lineno, reason=str(exc))
        )

    version = payload.get("version") if isinstance(payload, dict) else None
    if isinstance(version, str):
        version = migrate_version(version)
        payload["version"] = version
        if version not in SUPPORTED_VERSIONS:
            logger.error("Unsupported template version: %s", version)
            return ImportResult(
                error=TemplateImportError("unsupported_version", found=version, supported=SUPPORTED_VERSIONS)
            )

    try:
        template = DashboardTemplate.from_dict(payload)
    except TemplateDecodeError as exc:
        logger.error("Template decode failed: %s", exc)
        return ImportResult(
            error=TemplateImportError(
                "parse_failed",
                filename=filename,
                line=extract_line_number(str(exc)),
                reason=str(exc),
            )
        )

    issues = validate_template(template)
    errors = tuple(issue for issue in issues if issue.is_error)
    warnings = tuple(issue for issue in issues if not issue.is_error)
    if errors:
        logger.error("Template validation failed with %d errors", len(errors))
        for issue in errors:
            logger.error("  - %s", issue)
        return ImportResult(error=TemplateImportError("validation_failed", issues=errors))
    for issue in warnings:
        logger.warning("  - %s", issue)

    fixes = sanitize_template(template)
    for fix in fixes:
        logger.info("Applied fix: %s", fix)

    install_template(store, template)
    logger.info("Import of %s completed", filename)
    return ImportResult(template=template, warnings=warnings, fixes=tuple(fixes))


def install_template(store: DashboardStore, template: DashboardTemplate, *, now: datetime | None = None) -> None:
    """Replace the store's state with a template's contents.

    Imported datasets are inactive, sized "Imported", and stamped with the
    import time. Undo history is reset.
    """

    stamp = utc_timestamp(now).strftime("%Y-%m-%d %H:%M")
    datasets = [
        Dataset(
            id=export.id,
            name=export.name,
            size="Imported",
            uploaded_at=stamp,
            active=False,
            fields=list(export.fields),
            data=[list(row) for row in export.data or ()],
        )
        for export in template.datasets
    ]
    store.replace_state(
        title=template.metadata.title,
        datasets=datasets,
        widgets=list(template.widgets),
        layers=list(template.layers),
    )

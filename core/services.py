"""Service-layer functions for the core app.

Services in `core` bind Django settings and persistence to the pure
ingestion, charting and export modules. Views and management commands call
these instead of wiring the pieces themselves.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import BinaryIO

from django.conf import settings

from core.dashboard import DashboardStore
from core.export.errors import TemplateExportError
from core.export.service import ExportResult, ImportResult, export_dashboard, import_dashboard, install_template
from core.export.template import TemplateType
from core.parsers.csv_dataset import CsvParseResult
from core.parsers.schema_validator import ValidationConfig
from core.parsers.upload import CsvUploadManager
from core.storage import SaveResult, TemplateStorage

logger = logging.getLogger(__name__)


def validation_config_from_settings() -> ValidationConfig:
    """Return upload limits using `DASHBOARD_UPLOAD_MAX_MB`."""

    return ValidationConfig(max_file_size_mb=getattr(settings, "DASHBOARD_UPLOAD_MAX_MB", 100))


def new_store(*, title: str | None = None) -> DashboardStore:
    """Create an empty dashboard store sized by `DASHBOARD_HISTORY_SIZE`."""

    history_size = getattr(settings, "DASHBOARD_HISTORY_SIZE", 50)
    if title is None:
        return DashboardStore(history_size=history_size)
    return DashboardStore(title=title, history_size=history_size)


def upload_csv(
    filename: str,
    stream: BinaryIO,
    size_bytes: int,
    *,
    store: DashboardStore | None = None,
) -> CsvParseResult:
    """Run one upload through the CSV upload state machine.

    Args:
        filename: Original filename.
        stream: Binary file object positioned at the start.
        size_bytes: Declared file size.
        store: Store that receives the dataset; a fresh one when omitted.

    Returns:
        The parse result from `CsvUploadManager.handle_upload`.
    """

    manager = CsvUploadManager(store or new_store(), config=validation_config_from_settings())
    return manager.handle_upload(filename, stream, size_bytes)


def import_and_store(
    json_text: str,
    filename: str,
    name: str,
    *,
    storage: TemplateStorage | None = None,
    write: bool = True,
) -> tuple[ImportResult, SaveResult | None]:
    """Validate a template document and persist it under `name`.

    Args:
        json_text: Template document text.
        filename: Source name used in error messages.
        name: Storage name for the template.
        storage: Target storage; the default-prefixed storage when omitted.
        write: When False, validate only.

    Returns:
        Tuple of (import_result, save_result). `save_result` is None when the
        import failed or `write` is False.
    """

    result = import_dashboard(json_text, filename, new_store())
    if not result.ok or result.template is None or not write:
        return result, None
    saved = (storage or TemplateStorage()).save(name, result.template)
    if saved.ok:
        logger.info("Imported template %s stored as %r", filename, name)
    return result, saved


def export_stored_template(
    name: str,
    template_type: TemplateType,
    *,
    storage: TemplateStorage | None = None,
    now: datetime | None = None,
) -> ExportResult | None:
    """Re-export a stored template through the export pipeline.

    The stored document is installed into a fresh store first, so the output
    carries fresh timestamps and a Generic export drops dataset rows.

    Returns:
        ExportResult, or None when no template is stored under `name`.
    """

    loaded = (storage or TemplateStorage()).load(name)
    if not loaded.found:
        return None
    if loaded.template is None:
        reason = loaded.error.message if loaded.error is not None else "unreadable"
        return ExportResult(error=TemplateExportError("serialization_failed", name, reason))

    store = new_store()
    install_template(store, loaded.template, now=now)
    return export_dashboard(store, template_type, now=now)

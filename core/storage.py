"""Key-value persistence for dashboard templates.

`TemplateBlob` rows act as a flat key->text store. `TemplateStorage` namespaces
its keys with a prefix so other values can share the table.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from core.export.errors import TemplateExportError, TemplateImportError
from core.export.template import DashboardTemplate, TemplateDecodeError
from core.models import TemplateBlob

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "dashboard_template_"
MAX_KEY_LENGTH = 255


def get_item(key: str) -> str | None:
    """Return the value stored under `key`, or None."""

    return TemplateBlob.objects.filter(key=key).values_list("value", flat=True).first()


def set_item(key: str, value: str) -> None:
    """Insert or overwrite the value stored under `key`."""

    with transaction.atomic():
        TemplateBlob.objects.update_or_create(key=key, defaults={"value": value})


def remove_item(key: str) -> bool:
    """Delete `key`; returns False when it was not present."""

    with transaction.atomic():
        deleted, _ = TemplateBlob.objects.filter(key=key).delete()
    return deleted > 0


def keys(prefix: str = "") -> list[str]:
    """Return stored keys starting with `prefix`, sorted."""

    return list(TemplateBlob.objects.filter(key__startswith=prefix).order_by("key").values_list("key", flat=True))


@dataclass(frozen=True, slots=True)
class SaveResult:
    """The key written, or the reason the write failed."""

    key: str | None = None
    error: TemplateExportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class LoadResult:
    """A stored template, a decode failure, or neither when the name is unknown."""

    template: DashboardTemplate | None = None
    error: TemplateImportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.template is not None

    @property
    def found(self) -> bool:
        return self.template is not None or self.error is not None


class TemplateStorage:
    """Named template documents stored under `<prefix><name>` keys."""

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        self.prefix = prefix

    def key_for(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def save(self, name: str, template: DashboardTemplate) -> SaveResult:
        """Serialize and store a template, overwriting any previous value.

        Returns:
            SaveResult with the written key. A blank or over-long name fails
            with `filename_generation_failed`; encoding problems with
            `serialization_failed`; database errors with `download_failed`.
        """

        name = name.strip()
        if not name:
            return SaveResult(error=TemplateExportError("filename_generation_failed", name, "Name is empty"))
        key = self.key_for(name)
        if len(key) > MAX_KEY_LENGTH:
            return SaveResult(error=TemplateExportError("filename_generation_failed", name, "Name is too long"))

        try:
            content = template.to_json()
        except (TypeError, ValueError) as exc:
            logger.error("Serialization of template %r failed: %s", name, exc)
            return SaveResult(error=TemplateExportError("serialization_failed", "dashboard template", str(exc)))

        try:
            set_item(key, content)
        except DatabaseError as exc:
            logger.error("Storing template %r failed: %s", name, exc)
            return SaveResult(error=TemplateExportError("download_failed", key, str(exc)))

        logger.info("Stored template %r (%d bytes)", name, len(content))
        return SaveResult(key=key)

    def load(self, name: str) -> LoadResult:
        """Decode the template stored under `name`."""

        raw = get_item(self.key_for(name))
        if raw is None:
            return LoadResult()
        try:
            template = DashboardTemplate.from_json(raw)
        except json.JSONDecodeError as exc:
            logger.error("Stored template %r is not valid JSON: %s", name, exc)
            return LoadResult(error=TemplateImportError("parse_failed", filename=name, line=exc.lineno, reason=str(exc)))
        except TemplateDecodeError as exc:
            logger.error("Stored template %r has an invalid shape: %s", name, exc)
            return LoadResult(error=TemplateImportError("parse_failed", filename=name, reason=str(exc)))
        return LoadResult(template=template)

    def list_names(self) -> list[str]:
        """Return stored template names (keys with the prefix removed), sorted."""

        return [key[len(self.prefix):] for key in keys(self.prefix)]

    def delete(self, name: str) -> bool:
        """Remove a stored template; returns False when it did not exist."""

        removed = remove_item(self.key_for(name))
        if removed:
            logger.info("Deleted template %r", name)
        return removed

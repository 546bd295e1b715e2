"""Versioned dashboard template document.

Templates snapshot an entire dashboard. `Generic` templates carry the schema
of every dataset but no rows; `Complete` templates include the rows.

Schema versions use `MODEL-REVISION-ADDITION`. The only legacy alias is
`"1.0"`, which is rewritten to the current version on load.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from analysis.dto import Dataset, Field, Row
from core.dashboard import DashboardStore
from core.widgets import Layer, Widget

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1-0-0"
LEGACY_VERSION = "1.0"
SUPPORTED_VERSIONS: tuple[str, ...] = (LEGACY_VERSION, SCHEMA_VERSION)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^0-9A-Za-z]", re.ASCII)


class TemplateType(StrEnum):
    GENERIC = "Generic"
    COMPLETE = "Complete"


class TemplateDecodeError(ValueError):
    """Raised when a decoded JSON document does not have the template shape."""


@dataclass(slots=True)
class TemplateMetadata:
    """Title and timestamps (RFC 3339) of an exported dashboard."""

    title: str
    created_at: str
    exported_at: str
    template_type: TemplateType = TemplateType.GENERIC

    def as_json(self) -> dict[str, str]:
        return {
            "title": self.title,
            "created_at": self.created_at,
            "exported_at": self.exported_at,
            "template_type": str(self.template_type),
        }


@dataclass(slots=True)
class DatasetExport:
    """A dataset without its transient state; `data` is None in Generic templates."""

    id: str
    name: str
    fields: list[Field] = field(default_factory=list)
    data: list[Row] | None = None
    csv_path: str | None = None

    @classmethod
    def from_dataset(cls, dataset: Dataset, template_type: TemplateType) -> "DatasetExport":
        return cls(
            id=dataset.id,
            name=dataset.name,
            fields=list(dataset.fields),
            data=[list(row) for row in dataset.data] if template_type == TemplateType.COMPLETE else None,
        )

    def as_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "fields": [f.as_json() for f in self.fields],
        }
        if self.data is not None:
            payload["data"] = [list(row) for row in self.data]
        if self.csv_path is not None:
            payload["csv_path"] = self.csv_path
        return payload


@dataclass(slots=True)
class DashboardTemplate:
    """A complete, serializable dashboard snapshot."""

    version: str
    metadata: TemplateMetadata
    widgets: list[Widget] = field(default_factory=list)
    datasets: list[DatasetExport] = field(default_factory=list)
    layers: list[Layer] = field(default_factory=list)

    @classmethod
    def from_store(
        cls,
        store: DashboardStore,
        template_type: TemplateType,
        *,
        now: datetime | None = None,
    ) -> "DashboardTemplate":
        """Snapshot the store's current state."""

        stamp = utc_timestamp(now).isoformat()
        return cls(
            version=SCHEMA_VERSION,
            metadata=TemplateMetadata(
                title=store.title,
                created_at=stamp,
                exported_at=stamp,
                template_type=template_type,
            ),
            widgets=list(store.widgets),
            datasets=[DatasetExport.from_dataset(ds, template_type) for ds in store.datasets],
            layers=list(store.layers),
        )

    @property
    def template_type(self) -> TemplateType:
        return self.metadata.template_type

    @property
    def is_legacy_version(self) -> bool:
        return self.version == LEGACY_VERSION

    def as_json(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "metadata": self.metadata.as_json(),
            "widgets": [w.as_json() for w in self.widgets],
            "datasets": [d.as_json() for d in self.datasets],
            "layers": [layer.as_json() for layer in self.layers],
        }

    def to_json(self) -> str:
        """Serialize as pretty-printed JSON.

        Raises:
            ValueError: When a cell holds a non-finite float.
            TypeError: When a value is not JSON-serializable.
        """

        return json.dumps(self.as_json(), indent=2, ensure_ascii=False, allow_nan=False)

    @classmethod
    def from_json(cls, text: str) -> "DashboardTemplate":
        """Parse a template, migrating the legacy version.

        Raises:
            json.JSONDecodeError: When the text is not valid JSON.
            TemplateDecodeError: When the document is not shaped like a template.
        """

        return cls.from_dict(json.loads(text))

    @classmethod
    def from_dict(cls, payload: Any) -> "DashboardTemplate":
        """Build a template from a decoded JSON value.

        Raises:
            TemplateDecodeError: When a required key is missing or has the
                wrong shape.
        """

        document = _require_dict(payload, "template")
        raw_version = _require(document, "version", "template")
        if not isinstance(raw_version, str):
            raise TemplateDecodeError(f"`version` must be a string, got {raw_version!r}")
        version = migrate_version(raw_version)
        meta = _require_dict(_require(document, "metadata", "template"), "metadata")
        try:
            metadata = TemplateMetadata(
                title=str(_require(meta, "title", "metadata")),
                created_at=str(_require(meta, "created_at", "metadata")),
                exported_at=str(_require(meta, "exported_at", "metadata")),
                template_type=TemplateType(_require(meta, "template_type", "metadata")),
            )
            widgets = [Widget.from_json(_require_dict(w, "widgets[]")) for w in _require_list(document, "widgets")]
            datasets = [_decode_dataset(d) for d in _require_list(document, "datasets")]
            layers = [Layer.from_json(_require_dict(item, "layers[]")) for item in _require_list(document, "layers")]
        except (TypeError, ValueError) as exc:
            if isinstance(exc, TemplateDecodeError):
                raise
            raise TemplateDecodeError(str(exc)) from exc
        return cls(version=version, metadata=metadata, widgets=widgets, datasets=datasets, layers=layers)


def utc_timestamp(now: datetime | None = None) -> datetime:
    """Return `now` as an aware UTC datetime; naive values are taken to be UTC."""

    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def migrate_version(version: str) -> str:
    """Rewrite the legacy version alias to the current schema version."""

    if version == LEGACY_VERSION:
        logger.info("Migrating template from version '%s' to '%s'", LEGACY_VERSION, SCHEMA_VERSION)
        return SCHEMA_VERSION
    return version


def generate_filename(title: str, template_type: TemplateType, *, now: datetime | None = None) -> str | None:
    """Derive a download filename from the dashboard title.

    Every character other than an ASCII letter or digit becomes `_`.

    Returns:
        `<title><_complete?>_<YYYYmmdd_HHMMSS>.json`, or None for a blank title.
    """

    if not title.strip():
        return None
    safe_title = _UNSAFE_FILENAME_CHARS.sub("_", title)
    suffix = "_complete" if template_type == TemplateType.COMPLETE else ""
    stamp = utc_timestamp(now).strftime("%Y%m%d_%H%M%S")
    return f"{safe_title}{suffix}_{stamp}.json"


def _decode_dataset(raw: Any) -> DatasetExport:
    payload = _require_dict(raw, "datasets[]")
    data = payload.get("data")
    if data is not None and not (isinstance(data, list) and all(isinstance(row, list) for row in data)):
        raise TemplateDecodeError("datasets[].data must be a list of rows")
    csv_path = payload.get("csv_path")
    return DatasetExport(
        id=str(_require(payload, "id", "datasets[]")),
        name=str(_require(payload, "name", "datasets[]")),
        fields=[Field.from_json(_require_dict(f, "fields[]")) for f in _require_list(payload, "fields")],
        data=[list(row) for row in data] if data is not None else None,
        csv_path=str(csv_path) if csv_path is not None else None,
    )


def _require(payload: dict[str, Any], key: str, path: str) -> Any:
    if key not in payload:
        raise TemplateDecodeError(f"missing field `{key}` in {path}")
    return payload[key]


def _require_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TemplateDecodeError(f"{path} must be an object")
    return value


def _require_list(payload: dict[str, Any], key: str) -> list[Any]:
    value = _require(payload, key, "template")
    if not isinstance(value, list):
        raise TemplateDecodeError(f"`{key}` must be a list")
    return value

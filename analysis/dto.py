"""Dataset DTOs shared by ingestion, transformation, and chart building.

DTOs are plain data containers. They intentionally avoid any Django/ORM
dependencies so the pure pipeline can run (and be tested) without a database.

Cell values are a closed scalar union: a number (float), a string, a boolean,
or None for null. `bool` is checked before `float` everywhere because Python
treats booleans as integers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias

Scalar: TypeAlias = float | str | bool | None
Row: TypeAlias = list[Scalar]


class FieldType(StrEnum):
    """Semantic type inferred for a dataset column."""

    TEXT = "Text"
    NUMERIC = "Numeric"
    BOOLEAN = "Boolean"
    DATE = "Date"


@dataclass(frozen=True, slots=True)
class Field:
    """A named dataset column.

    Attributes:
        name: Column header; unique within a dataset.
        field_type: Inferred semantic type.
    """

    name: str
    field_type: FieldType = FieldType.TEXT

    def as_json(self) -> dict[str, str]:
        """Return a JSON-serializable representation."""

        return {"name": self.name, "field_type": str(self.field_type)}

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Field":
        """Build a Field from a decoded JSON object.

        Raises:
            ValueError: When the field type is not recognized.
        """

        return cls(name=str(payload.get("name", "")), field_type=FieldType(payload.get("field_type", "Text")))


@dataclass(slots=True)
class Dataset:
    """An uploaded table with an inferred schema.

    `active` is owned by the dashboard store; ingestion always creates
    inactive datasets.

    Attributes:
        id: Opaque identifier (`ds_<uuid>` for uploads).
        name: Display name, usually the uploaded filename.
        size: Human-readable size label.
        uploaded_at: Human-readable upload timestamp.
        active: Whether the dataset is the dashboard's active dataset.
        fields: Ordered columns.
        data: Ordered rows; each row has one cell per field.
    """

    id: str
    name: str
    size: str = ""
    uploaded_at: str = ""
    active: bool = False
    fields: list[Field] = field(default_factory=list)
    data: list[Row] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        """Number of data rows."""

        return len(self.data)

    def field_names(self) -> list[str]:
        """Return the ordered list of field names."""

        return [f.name for f in self.fields]

    def as_json(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""

        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "uploaded_at": self.uploaded_at,
            "active": self.active,
            "fields": [f.as_json() for f in self.fields],
            "data": [list(row) for row in self.data],
        }

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Dataset":
        """Build a Dataset from a decoded JSON object.

        Raises:
            TypeError: When a field is not an object or a row is not a list.
            ValueError: When a field type is not recognized.
        """

        fields = payload.get("fields") or ()
        rows = payload.get("data") or ()
        if not all(isinstance(f, dict) for f in fields):
            raise TypeError("dataset fields must be JSON objects")
        if not all(isinstance(row, list) for row in rows):
            raise TypeError("dataset rows must be JSON arrays")
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            size=str(payload.get("size", "")),
            uploaded_at=str(payload.get("uploaded_at", "")),
            active=bool(payload.get("active", False)),
            fields=[Field.from_json(f) for f in fields],
            data=[list(row) for row in rows],
        )


@dataclass(slots=True)
class DataMapping:
    """Assignment of dataset fields to chart roles.

    `x_axis` and `y_axis` drive the grouped tabular transform; the remaining
    roles are only read by the widget types that need them.

    Attributes:
        x_axis: Category/x field name.
        y_axis: Ordered measure field names.
        category: Secondary category (heatmap y-axis).
        size: Bubble size field (scatter).
        color: Color grouping field (scatter).
        open: Opening value field (candlestick).
        close: Closing value field (candlestick).
        high: High value field (candlestick).
        low: Low value field (candlestick).
        hierarchy: Ordered hierarchy levels (treemap).
        columns: Visible columns (table).
        kpi_field: Field aggregated by KPI widgets.
        kpi_aggregation: KPI aggregation name.
    """

    x_axis: str | None = None
    y_axis: list[str] = field(default_factory=list)
    category: str | None = None
    size: str | None = None
    color: str | None = None
    open: str | None = None
    close: str | None = None
    high: str | None = None
    low: str | None = None
    hierarchy: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    kpi_field: str | None = None
    kpi_aggregation: str | None = None

    def as_json(self) -> dict[str, Any]:
        """Return a JSON-serializable representation.

        Unset roles (None or empty lists) are omitted to keep documents small.
        """

        payload: dict[str, Any] = {}
        for name in _MAPPING_SCALAR_ROLES:
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        for name in _MAPPING_LIST_ROLES:
            values = getattr(self, name)
            if values:
                payload[name] = list(values)
        return payload

    @classmethod
    def from_json(cls, payload: dict[str, Any] | None) -> "DataMapping":
        """Build a DataMapping from a decoded JSON object, tolerating missing keys."""

        payload = payload or {}
        return cls(
            x_axis=_optional_str(payload.get("x_axis")),
            y_axis=[str(v) for v in payload.get("y_axis") or ()],
            category=_optional_str(payload.get("category")),
            size=_optional_str(payload.get("size")),
            color=_optional_str(payload.get("color")),
            open=_optional_str(payload.get("open")),
            close=_optional_str(payload.get("close")),
            high=_optional_str(payload.get("high")),
            low=_optional_str(payload.get("low")),
            hierarchy=[str(v) for v in payload.get("hierarchy") or ()],
            columns=[str(v) for v in payload.get("columns") or ()],
            kpi_field=_optional_str(payload.get("kpi_field")),
            kpi_aggregation=_optional_str(payload.get("kpi_aggregation")),
        )


_MAPPING_SCALAR_ROLES = (
    "x_axis",
    "category",
    "size",
    "color",
    "open",
    "close",
    "high",
    "low",
    "kpi_field",
    "kpi_aggregation",
)
_MAPPING_LIST_ROLES = ("y_axis", "hierarchy", "columns")


def is_number(value: object) -> bool:
    """Return True when a cell value is numeric (booleans excluded)."""

    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)

"""Column type inference for uploaded CSV data.

Rules:
- Only the first `SAMPLE_SIZE` rows are inspected.
- Null synonyms (`""`, `null`, `n/a`, `na`, case-insensitive) do not count
  toward classification.
- Candidate types are checked in a fixed priority order (Boolean, Numeric,
  Date); the first whose match ratio reaches `TYPE_THRESHOLD` wins.
- Anything else is Text.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from analysis.dto import FieldType

SAMPLE_SIZE = 100
TYPE_THRESHOLD = 0.9

NULL_SYNONYMS = frozenset({"", "null", "n/a", "na"})
BOOLEAN_VALUES = frozenset({"true", "false", "yes", "no", "1", "0", "y", "n"})

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d-%m-%Y",
)

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)
_FLOAT_RE = re.compile(
    r"^[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class TypeInferenceResult:
    """Outcome of inferring types for a whole table.

    Args:
        columns: Ordered `(header, FieldType)` pairs when inference succeeded.
        error: Failure message when inference could not run.
    """

    columns: tuple[tuple[str, FieldType], ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when inference succeeded."""

        return self.error is None


def parse_float(value: str) -> float | None:
    """Parse a float using a strict grammar.

    Python's `float()` accepts digit separators and surrounding whitespace;
    cell values must match the plain decimal/scientific grammar instead.

    Args:
        value: Raw cell text.

    Returns:
        Parsed float, or None when the text is not a number.
    """

    if not _FLOAT_RE.match(value):
        return None
    return float(value)


def is_boolean(value: str) -> bool:
    """Return True when the value is a recognized boolean literal."""

    return value.strip().lower() in BOOLEAN_VALUES


def is_numeric(value: str) -> bool:
    """Return True when the value parses as a 64-bit float."""

    return parse_float(value.strip()) is not None


def is_rfc3339(value: str) -> bool:
    """Return True for an RFC 3339 timestamp (offset or `Z` required)."""

    text = value.strip()
    if not _RFC3339_RE.match(text):
        return False
    try:
        datetime.fromisoformat(text.replace("z", "Z").replace("t", "T"))
    except ValueError:
        return False
    return True


def is_date(value: str) -> bool:
    """Return True when the value is RFC 3339 or matches a known date pattern."""

    text = value.strip()
    if is_rfc3339(text):
        return True
    for fmt in DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return True
    return False


_CANDIDATES: tuple[tuple[FieldType, Callable[[str], bool]], ...] = (
    (FieldType.BOOLEAN, is_boolean),
    (FieldType.NUMERIC, is_numeric),
    (FieldType.DATE, is_date),
)


def detect_column_type(values: Sequence[str]) -> FieldType:
    """Classify a column from its sampled values.

    Args:
        values: Raw cell strings for one column (already sampled).

    Returns:
        The first FieldType in priority order whose match ratio reaches
        `TYPE_THRESHOLD`, otherwise `FieldType.TEXT`.
    """

    present = [v for v in values if v.strip().lower() not in NULL_SYNONYMS]
    if not present:
        return FieldType.TEXT

    total = len(present)
    for field_type, matcher in _CANDIDATES:
        matched = sum(1 for v in present if matcher(v))
        if matched / total >= TYPE_THRESHOLD:
            return field_type
    return FieldType.TEXT


def detect_types(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> TypeInferenceResult:
    """Infer a FieldType for each header from the first `SAMPLE_SIZE` rows.

    Args:
        headers: Ordered column headers.
        rows: Raw string rows; short rows are padded with empty cells.

    Returns:
        TypeInferenceResult with one entry per header, or an error when the
        header list is empty.
    """

    if not headers:
        return TypeInferenceResult(error="No headers found")

    sample = rows[:SAMPLE_SIZE]
    columns: list[tuple[str, FieldType]] = []
    for idx, header in enumerate(headers):
        values = [row[idx] if idx < len(row) else "" for row in sample]
        columns.append((header, detect_column_type(values)))
    return TypeInferenceResult(columns=tuple(columns))


def coerce_cell(value: str) -> float | bool | str:
    """Convert a raw cell to a scalar: number, then boolean, then string.

    Non-finite numbers are stored as 0.0 because they have no JSON encoding.

    Args:
        value: Trimmed raw cell text.

    Returns:
        The coerced scalar.
    """

    number = parse_float(value)
    if number is not None:
        return number if math.isfinite(number) else 0.0
    if value == "true":
        return True
    if value == "false":
        return False
    return value

"""CSV text to Dataset ingestion.

Guiding rules:
- Header cells and values are whitespace-trimmed; blank lines are skipped.
- Every data row must have as many cells as the header.
- Column types come from sampling; cell values are coerced independently
  (number, then boolean, then string), so a numeric-looking cell in a Text
  column is still stored as a number.
- Parsed datasets are always created inactive.
"""

from __future__ import annotations

import csv
import io
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from analysis.dto import Dataset, Field, Row
from analysis.type_inference import SAMPLE_SIZE, coerce_cell, detect_types
from core.parsers.errors import CsvError
from core.parsers.schema_validator import DEFAULT_VALIDATION_CONFIG, ValidationConfig, validate_structure


@dataclass(frozen=True, slots=True)
class CsvParseResult:
    """Outcome of `parse_csv_to_dataset`.

    Args:
        dataset: Parsed dataset on success.
        fields: Inferred fields (same objects as `dataset.fields`).
        error: Failure on error.
    """

    dataset: Dataset | None = None
    fields: tuple[Field, ...] = field(default_factory=tuple)
    error: CsvError | None = None

    @property
    def ok(self) -> bool:
        """Return True when parsing succeeded."""

        return self.error is None


def format_size(size_bytes: int) -> str:
    """Format a byte count as `B`, `KB`, or `MB` with one decimal above bytes."""

    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def sniff_delimiter(csv_text: str, config: ValidationConfig = DEFAULT_VALIDATION_CONFIG) -> str:
    """Pick the delimiter for a file from its header line.

    Comma wins whenever the header line contains one; otherwise the first
    allowed delimiter present is used.
    """

    first_line = csv_text.split("\n", 1)[0]
    if "," in first_line:
        return ","
    for delimiter in config.allowed_delimiters:
        if delimiter in first_line:
            return delimiter
    return ","


def parse_csv_to_dataset(
    csv_text: str,
    filename: str,
    size_bytes: int,
    *,
    config: ValidationConfig = DEFAULT_VALIDATION_CONFIG,
) -> CsvParseResult:
    """Parse CSV text into a Dataset with inferred fields.

    Args:
        csv_text: Full decoded file contents.
        filename: Original filename, used as the dataset name.
        size_bytes: File size used for the display size label.
        config: Upload limits for header validation.

    Returns:
        CsvParseResult holding the dataset and its fields, or a CsvError.
    """

    reader = csv.reader(io.StringIO(csv_text), delimiter=sniff_delimiter(csv_text, config))
    headers: list[str] = []
    raw_rows: list[list[str]] = []
    try:
        for record in reader:
            if not record or (len(record) == 1 and not record[0].strip()):
                continue
            cells = [cell.strip() for cell in record]
            if not headers and not raw_rows:
                headers = cells
                structure_error = validate_structure(headers, config)
                if structure_error is not None:
                    return CsvParseResult(error=structure_error)
                continue
            if len(cells) != len(headers):
                return CsvParseResult(
                    error=CsvError.parse_error(
                        row=len(raw_rows) + 1,
                        detail=f"found record with {len(cells)} fields, but the header has {len(headers)} fields",
                    )
                )
            raw_rows.append(cells)
    except csv.Error as exc:
        if not headers:
            return CsvParseResult(error=CsvError.invalid_format(f"Failed to read headers: {exc}"))
        return CsvParseResult(error=CsvError.parse_error(row=len(raw_rows) + 1, detail=str(exc)))

    if not headers:
        structure_error = validate_structure(headers, config)
        if structure_error is not None:
            return CsvParseResult(error=structure_error)
    if not raw_rows:
        return CsvParseResult(error=CsvError("empty_file"))

    inferred = detect_types(headers, raw_rows[:SAMPLE_SIZE])
    if inferred.error is not None:
        return CsvParseResult(error=CsvError("type_inference_failed", detail=inferred.error))

    fields = tuple(Field(name=name, field_type=field_type) for name, field_type in inferred.columns)
    data: list[Row] = [[coerce_cell(cell) for cell in row] for row in raw_rows]

    dataset = Dataset(
        id=f"ds_{uuid.uuid4()}",
        name=filename,
        size=format_size(size_bytes),
        uploaded_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M"),
        active=False,
        fields=list(fields),
        data=data,
    )
    return CsvParseResult(dataset=dataset, fields=fields)

"""Typed CSV ingestion errors.

Errors are returned as values by the ingestion functions rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CsvErrorKind = Literal[
    "file_too_large",
    "invalid_csv_format",
    "empty_file",
    "no_headers",
    "inconsistent_row_length",
    "file_read_error",
    "parse_error",
    "type_inference_failed",
]


@dataclass(frozen=True, slots=True)
class CsvError:
    """A CSV ingestion failure.

    Args:
        kind: Failure category.
        detail: Free-form detail for kinds that carry a message.
        row: 1-based data row index for `parse_error`.
        max_mb: Configured limit for `file_too_large`.
        actual_mb: Observed size (whole MB) for `file_too_large`.
        expected: Expected column count for `inconsistent_row_length`.
        found: Observed column count for `inconsistent_row_length`.
    """

    kind: CsvErrorKind
    detail: str = ""
    row: int | None = None
    max_mb: int | None = None
    actual_mb: int | None = None
    expected: int | None = None
    found: int | None = None

    @property
    def message(self) -> str:
        """Human-readable message."""

        if self.kind == "file_too_large":
            return f"File too large: {self.actual_mb} MB exceeds maximum of {self.max_mb} MB"
        if self.kind == "invalid_csv_format":
            return f"Invalid CSV format: {self.detail}"
        if self.kind == "empty_file":
            return "File is empty"
        if self.kind == "no_headers":
            return "CSV has no header row"
        if self.kind == "inconsistent_row_length":
            return f"Row length inconsistent: expected {self.expected} columns, found {self.found}"
        if self.kind == "file_read_error":
            return f"Failed to read file: {self.detail}"
        if self.kind == "parse_error":
            return f"Parse error at row {self.row}: {self.detail}"
        return f"Type inference failed: {self.detail}"

    def __str__(self) -> str:
        return self.message

    @classmethod
    def file_too_large(cls, *, max_mb: int, actual_mb: int) -> "CsvError":
        """Build a `file_too_large` error."""

        return cls("file_too_large", max_mb=max_mb, actual_mb=actual_mb)

    @classmethod
    def invalid_format(cls, detail: str) -> "CsvError":
        """Build an `invalid_csv_format` error."""

        return cls("invalid_csv_format", detail=detail)

    @classmethod
    def parse_error(cls, *, row: int, detail: str) -> "CsvError":
        """Build a `parse_error` error for a 1-based data row."""

        return cls("parse_error", detail=detail, row=row)

"""Upload precondition checks for CSV files.

Checks run before (file size, extension) and right after (header structure)
tokenization. They never inspect cell values; that is left to type inference.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from core.parsers.errors import CsvError

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024
STANDARD_EXTENSIONS: tuple[str, ...] = (".csv", ".txt", ".tsv")


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    """Limits applied to uploads.

    Attributes:
        max_file_size_mb: Largest accepted file, in whole megabytes.
        min_columns: Minimum header count.
        max_columns: Maximum header count.
        require_headers: Reject files without a header row.
        allowed_delimiters: Delimiters the parser may sniff.
    """

    max_file_size_mb: int = 100
    min_columns: int = 1
    max_columns: int = 1000
    require_headers: bool = True
    allowed_delimiters: tuple[str, ...] = (",", "\t", ";", "|")


DEFAULT_VALIDATION_CONFIG = ValidationConfig()


def validate_size(size_bytes: int, config: ValidationConfig = DEFAULT_VALIDATION_CONFIG) -> CsvError | None:
    """Return a `file_too_large` CsvError when the file exceeds the limit (whole MB)."""

    size_mb = size_bytes // BYTES_PER_MB
    if size_mb > config.max_file_size_mb:
        return CsvError.file_too_large(max_mb=config.max_file_size_mb, actual_mb=size_mb)
    return None


def validate_file(size_bytes: int, filename: str, config: ValidationConfig = DEFAULT_VALIDATION_CONFIG) -> CsvError | None:
    """Check file-level preconditions.

    A non-standard extension is logged as a warning but accepted.

    Args:
        size_bytes: File size in bytes.
        filename: Original filename.
        config: Upload limits.

    Returns:
        A `file_too_large` CsvError, or None when the file is acceptable.
    """

    too_large = validate_size(size_bytes, config)
    if too_large is not None:
        return too_large

    if not filename.lower().endswith(STANDARD_EXTENSIONS):
        logger.warning("File %r doesn't have a standard CSV extension (.csv, .txt, .tsv)", filename)
    return None


def validate_structure(headers: Sequence[str], config: ValidationConfig = DEFAULT_VALIDATION_CONFIG) -> CsvError | None:
    """Check header-row sanity.

    Checks run in order: presence, column count bounds, empty names,
    duplicate names. The first failing check wins.

    Args:
        headers: Tokenized header cells.
        config: Upload limits.

    Returns:
        A CsvError, or None when the headers are acceptable.
    """

    if config.require_headers and not headers:
        return CsvError("no_headers")

    if len(headers) < config.min_columns:
        return CsvError.invalid_format(f"Too few columns: {len(headers)} (minimum: {config.min_columns})")
    if len(headers) > config.max_columns:
        return CsvError.invalid_format(f"Too many columns: {len(headers)} (maximum: {config.max_columns})")

    for idx, header in enumerate(headers):
        if not header.strip():
            return CsvError.invalid_format(f"Empty header at column {idx + 1}")

    seen: set[str] = set()
    for header in headers:
        if header in seen:
            return CsvError.invalid_format(f"Duplicate header: '{header}'")
        seen.add(header)
    return None

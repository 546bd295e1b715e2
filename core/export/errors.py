"""Typed export/import failures and validation issues.

Each error carries a technical `message` for logs and a `user_message` for
display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal


class ValidationSeverity(StrEnum):
    """Errors block an import; warnings are logged and the import proceeds."""

    ERROR = "ERROR"
    WARNING = "WARNING"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One finding from template validation.

    Attributes:
        severity: Blocking (`ERROR`) or advisory (`WARNING`).
        field_path: Dotted path into the document, e.g. `widgets[0].id`.
        message: Description of the problem.
    """

    severity: ValidationSeverity
    field_path: str
    message: str

    @classmethod
    def error(cls, field_path: str, message: str) -> "ValidationIssue":
        return cls(ValidationSeverity.ERROR, field_path, message)

    @classmethod
    def warning(cls, field_path: str, message: str) -> "ValidationIssue":
        return cls(ValidationSeverity.WARNING, field_path, message)

    @property
    def is_error(self) -> bool:
        return self.severity == ValidationSeverity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity}] {self.field_path}: {self.message}"


ExportErrorKind = Literal["serialization_failed", "filename_generation_failed", "download_failed", "empty_dashboard"]


@dataclass(frozen=True, slots=True)
class TemplateExportError:
    """An export failure.

    Args:
        kind: Failure category.
        subject: What failed (serialized context, title, or filename).
        reason: Underlying error text.
    """

    kind: ExportErrorKind
    subject: str = ""
    reason: str = ""

    @property
    def message(self) -> str:
        if self.kind == "serialization_failed":
            return f"Failed to serialize {self.subject}: {self.reason}"
        if self.kind == "filename_generation_failed":
            return f"Cannot generate filename for '{self.subject}': {self.reason}"
        if self.kind == "download_failed":
            return f"Failed to download file '{self.subject}': {self.reason}"
        return "Cannot export empty dashboard (no widgets configured)"

    @property
    def user_message(self) -> str:
        if self.kind == "serialization_failed":
            return "Unable to prepare dashboard for export. Please try again."
        if self.kind == "filename_generation_failed":
            return "Cannot create download filename. Please rename your dashboard."
        if self.kind == "download_failed":
            return "Download failed. Please check your storage settings and try again."
        return "Cannot export an empty dashboard. Please add at least one widget."

    def __str__(self) -> str:
        return self.message


ImportErrorKind = Literal["parse_failed", "unsupported_version", "validation_failed"]


@dataclass(frozen=True, slots=True)
class TemplateImportError:
    """An import failure.

    Args:
        kind: Failure category.
        filename: Source filename for `parse_failed`.
        line: Best-effort line number for `parse_failed`.
        reason: Decoder error text for `parse_failed`.
        found: Offending version for `unsupported_version`.
        supported: Supported versions for `unsupported_version`.
        issues: Blocking issues for `validation_failed`.
    """

    kind: ImportErrorKind
    filename: str = ""
    line: int | None = None
    reason: str = ""
    found: str = ""
    supported: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        if self.kind == "parse_failed":
            if self.line is not None:
                return f"Failed to parse '{self.filename}' at line {self.line}: {self.reason}"
            return f"Failed to parse '{self.filename}': {self.reason}"
        if self.kind == "unsupported_version":
            return (
                f"Template version '{self.found}' is not supported. "
                f"Supported versions: {', '.join(self.supported)}"
            )
        return f"Template validation failed ({len(self.issues)} errors)"

    @property
    def user_message(self) -> str:
        if self.kind == "parse_failed":
            return "Invalid file format. Please select a valid dashboard template (.json)."
        if self.kind == "unsupported_version":
            return (
                f"This template (version {self.found}) is not compatible with the current version. "
                "Please export a new template."
            )
        blocking = sum(1 for issue in self.issues if issue.is_error)
        return f"Template validation failed with {blocking} error(s). Check the logs for details."

    def __str__(self) -> str:
        return self.message

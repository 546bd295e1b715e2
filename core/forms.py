"""Forms for core upload and import workflows."""

from __future__ import annotations

from django import forms

from core.parsers.schema_validator import validate_file
from core.services import validation_config_from_settings


class CsvUploadForm(forms.Form):
    """Validate an uploaded CSV file before it is read."""

    file = forms.FileField(
        label="CSV file",
        help_text="Comma, tab, semicolon or pipe separated values with a header row.",
    )

    def clean_file(self):
        """Reject files over the configured size limit.

        Returns:
            The uploaded file object.
        """

        uploaded = self.cleaned_data["file"]
        error = validate_file(uploaded.size, uploaded.name, validation_config_from_settings())
        if error is not None:
            raise forms.ValidationError(error.message)
        return uploaded


class TemplateImportForm(forms.Form):
    """Accept a template document as an uploaded file or pasted JSON."""

    name = forms.CharField(
        max_length=200,
        label="Template name",
        help_text="Name the template is stored under; an existing template with this name is replaced.",
    )
    file = forms.FileField(required=False, label="Template file (.json)")
    text = forms.CharField(
        required=False,
        label="Template JSON",
        widget=forms.Textarea(attrs={"rows": 12, "cols": 80}),
    )

    def clean(self) -> dict:
        """Require exactly one source and decode it to `json_text`.

        Adds `json_text` and `source_name` to `cleaned_data`.
        """

        cleaned = super().clean()
        uploaded = cleaned.get("file")
        text = (cleaned.get("text") or "").strip()
        if uploaded and text:
            raise forms.ValidationError("Provide either a template file or pasted JSON, not both.")
        if not uploaded and not text:
            raise forms.ValidationError("Provide a template file or paste the template JSON.")

        if uploaded:
            try:
                cleaned["json_text"] = uploaded.read().decode("utf-8")
            except UnicodeDecodeError as exc:
                raise forms.ValidationError("Template file is not valid UTF-8 text.") from exc
            cleaned["source_name"] = uploaded.name
        else:
            cleaned["json_text"] = text
            cleaned["source_name"] = "pasted template"
        return cleaned
